"""Shared fixtures for qrbrand tests."""
import logging

import numpy as np
import pytest
from PIL import Image

from qrbrand.generator import ModuleGrid
from qrbrand.text import GlyphSource

pytest_plugins = ["pytester"]


@pytest.fixture(scope="session")
def glyphs():
    """Default caption font (system DejaVu Sans or Pillow's bundled font)."""
    return GlyphSource.load()


@pytest.fixture
def checker_grid():
    """5x5 grid with alternating dark modules, dark at (0, 0)."""
    cells = [[(x + y) % 2 == 0 for x in range(5)] for y in range(5)]
    return ModuleGrid(np.array(cells, dtype=bool))


@pytest.fixture
def make_logo():
    def _make(w, h, color=(255, 0, 0, 255)):
        return Image.new("RGBA", (w, h), color)
    return _make


@pytest.fixture(autouse=True)
def reset_qrbrand_logger():
    """CLI tests install handlers on the qrbrand logger; drop them afterwards."""
    yield
    root = logging.getLogger("qrbrand")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
