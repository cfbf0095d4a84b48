"""Module rasterizer: turn a boolean module grid into a crisp RGBA canvas."""

import numpy as np

from qrbrand.canvas import BLACK, Canvas
from qrbrand.errors import EmptyGridError, SizeTooSmallError
from qrbrand.generator import ModuleGrid
from qrbrand.logging import audit, get_logger, trace

log = get_logger("raster")

MIN_PIXELS_PER_MODULE = 2


def pixels_per_module(module_count: int, size: int, quiet_modules: int) -> int:
    """Whole pixels per module for a *size*-pixel canvas, quiet zone included."""
    total_modules = module_count + 2 * quiet_modules
    return size // total_modules


@trace
def render_qr_rgba(grid: ModuleGrid, size: int, quiet_modules: int = 4) -> Canvas:
    """Render *grid* into a square canvas of (at most) *size* pixels.

    Each module gets the same whole number of pixels, so the output is
    ``ppm * total_modules`` wide and may be slightly smaller than *size*.
    Fractional module widths are never produced.

    Raises:
        EmptyGridError: the grid has no modules.
        SizeTooSmallError: fewer than 2 pixels per module would fit.
    """
    n = grid.n
    if n == 0:
        raise EmptyGridError("QR module count is zero", param="grid.n", value=n)

    total_modules = n + 2 * quiet_modules
    ppm = pixels_per_module(n, size, quiet_modules)
    if ppm < MIN_PIXELS_PER_MODULE:
        raise SizeTooSmallError(
            f"Requested size {size} too small for total modules {total_modules} "
            f"(ppm={ppm}). Increase --size.",
            param="size", value=size,
        )

    out = ppm * total_modules
    canvas = Canvas.new(out, out)

    # Upscale the module grid to pixel blocks, then offset by the quiet zone.
    dark = np.repeat(np.repeat(grid.modules, ppm, axis=0), ppm, axis=1)
    q = quiet_modules * ppm
    region = canvas.pixels[q:q + n * ppm, q:q + n * ppm]
    region[dark] = BLACK

    audit("qr.rasterized", logger=log,
          modules=n, quiet=quiet_modules, ppm=ppm, image_px=f"{out}x{out}", requested=size)
    return canvas
