"""Render parameters.

There is no global configuration: every render receives a RenderConfig.
"""

import math
from dataclasses import dataclass

from qrbrand.errors import InvalidConfigError
from qrbrand.generator import ECC_NAMES
from qrbrand.logo import check_logo_scale

DEFAULT_SIZE = 1024
DEFAULT_QUIET = 4
DEFAULT_LOGO_SCALE = 0.20
DEFAULT_LOGO_PAD = 0.18
DEFAULT_ECC = "H"


@dataclass(frozen=True)
class RenderConfig:
    """Immutable render settings.

    Attributes:
        size: Requested QR side in pixels (output may be slightly smaller).
        quiet_modules: Quiet-zone width in modules; 4 is the usual minimum.
        logo_scale: Logo box as a fraction of QR width, 0.05-0.35.
        logo_plate: Draw a white plate behind the logo.
        logo_pad: Plate padding as a fraction of the logo's larger side.
        ecc: Error correction level L/M/Q/H.
        font_path: TrueType/OpenType font for captions; None picks a default.
    """

    size: int = DEFAULT_SIZE
    quiet_modules: int = DEFAULT_QUIET
    logo_scale: float = DEFAULT_LOGO_SCALE
    logo_plate: bool = True
    logo_pad: float = DEFAULT_LOGO_PAD
    ecc: str = DEFAULT_ECC
    font_path: str | None = None

    def validate(self) -> "RenderConfig":
        """Reject out-of-range values before any rendering starts."""
        if self.size <= 0:
            raise InvalidConfigError(f"--size must be positive (got {self.size})", param="size", value=self.size)
        if self.quiet_modules < 0:
            raise InvalidConfigError(f"--quiet must not be negative (got {self.quiet_modules})",
                                     param="quiet_modules", value=self.quiet_modules)
        check_logo_scale(self.logo_scale)
        if not math.isfinite(self.logo_pad) or self.logo_pad < 0:
            raise InvalidConfigError(f"--logo-pad must be a non-negative number (got {self.logo_pad})",
                                     param="logo_pad", value=self.logo_pad)
        if self.ecc.upper() not in ECC_NAMES:
            raise InvalidConfigError(f"--ecc must be one of L, M, Q, H (got {self.ecc!r})",
                                     param="ecc", value=self.ecc)
        return self

    @classmethod
    def from_args(cls, args) -> "RenderConfig":
        """Build from parsed CLI arguments."""
        return cls(
            size=args.size,
            quiet_modules=args.quiet,
            logo_scale=args.logo_scale,
            logo_plate=args.logo_plate,
            logo_pad=args.logo_pad,
            ecc=args.ecc,
            font_path=args.font,
        )
