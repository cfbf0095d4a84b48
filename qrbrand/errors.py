"""Exceptions raised by the render pipeline.

Every error is fatal to the current render: nothing is retried and no output
file is written. Each exception keeps the offending parameter and value as
attributes so callers can report them without re-running.
"""


class QRBrandError(Exception):
    """Base class for all qrbrand failures."""

    def __init__(self, message: str, *, param: str | None = None, value: object = None):
        super().__init__(message)
        self.param = param
        self.value = value


class EmptyGridError(QRBrandError):
    """The module grid has no cells."""


class SizeTooSmallError(QRBrandError):
    """The requested size leaves fewer than 2 pixels per module."""


class InvalidLogoScaleError(QRBrandError):
    """Logo scale outside [0.05, 0.35]."""


class ImageDecodeError(QRBrandError):
    """The logo file could not be read or decoded."""


class FontLoadError(QRBrandError):
    """No usable glyph source could be loaded."""


class ImageWriteError(QRBrandError):
    """The output image could not be written."""


class InvalidURLError(QRBrandError):
    """The payload is not an absolute URL."""


class InvalidConfigError(QRBrandError):
    """A render parameter is out of range."""
