"""QR symbol producer: encode a payload with ``qrcode`` and expose its module grid."""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import qrcode
import qrcode.constants

from qrbrand.logging import audit, get_logger, trace

log = get_logger("generator")


class ECCLevel(Enum):
    L = qrcode.constants.ERROR_CORRECT_L  # 7%
    M = qrcode.constants.ERROR_CORRECT_M  # 15%
    Q = qrcode.constants.ERROR_CORRECT_Q  # 25%
    H = qrcode.constants.ERROR_CORRECT_H  # 30%


ECC_NAMES = {"L": ECCLevel.L, "M": ECCLevel.M, "Q": ECCLevel.Q, "H": ECCLevel.H}


@dataclass(frozen=True, eq=False)
class ModuleGrid:
    """Square grid of QR modules, True = dark. Read-only."""

    modules: np.ndarray

    def __post_init__(self):
        arr = np.array(self.modules, dtype=bool)
        if arr.size and (arr.ndim != 2 or arr.shape[0] != arr.shape[1]):
            raise ValueError(f"module grid must be square, got shape {arr.shape}")
        arr.setflags(write=False)
        object.__setattr__(self, "modules", arr)

    @property
    def n(self) -> int:
        return self.modules.shape[0] if self.modules.ndim == 2 else 0

    def is_dark(self, x: int, y: int) -> bool:
        return bool(self.modules[y, x])


def ecc_level(name: str) -> ECCLevel:
    try:
        return ECC_NAMES[name.upper()]
    except KeyError:
        raise ValueError(f"unknown error correction level {name!r} (expected one of L, M, Q, H)") from None


@trace
def make_module_grid(data: str, ecc: str = "H", version: int | None = None) -> ModuleGrid:
    """Encode *data* and return its module grid without any quiet zone.

    Args:
        data: Payload to encode (URL, text, ...).
        ecc: Error correction level L/M/Q/H. H survives a centered logo best.
        version: QR version 1-40, or None to pick the smallest that fits.
    """
    qr = qrcode.QRCode(
        version=version,
        error_correction=ecc_level(ecc).value,
        box_size=1,
        border=0,
    )
    qr.add_data(data)
    qr.make(fit=(version is None))

    grid = ModuleGrid(np.array(qr.modules, dtype=bool))
    audit("qr.grid_built", logger=log,
          data=data[:80], version=qr.version, modules=f"{grid.n}x{grid.n}", ecc=ecc.upper())
    return grid
