"""Render pipeline: payload -> modules -> canvas -> logo -> caption -> PNG."""

from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from PIL import Image

from qrbrand.canvas import Canvas
from qrbrand.caption import add_text_below
from qrbrand.config import RenderConfig
from qrbrand.errors import ImageWriteError, InvalidURLError
from qrbrand.generator import make_module_grid
from qrbrand.logging import audit, get_logger, trace
from qrbrand.logo import load_logo, overlay_logo_center
from qrbrand.raster import render_qr_rgba
from qrbrand.text import GlyphSource

log = get_logger("pipeline")


def validate_url(url: str) -> str:
    """Check *url* is absolute (scheme plus host or path) and return it normalized."""
    try:
        parts = urlsplit(url.strip())
    except ValueError as e:
        raise InvalidURLError(f"Invalid URL: {url} ({e})", param="url", value=url) from e
    if not parts.scheme or not (parts.netloc or parts.path):
        raise InvalidURLError(f"Invalid URL: {url} (did you include https:// ?)", param="url", value=url)

    # Lowercase the host only; userinfo is case-sensitive.
    userinfo, at, host = parts.netloc.rpartition("@")
    netloc = userinfo + at + host.lower()
    path = parts.path or ("/" if netloc else "")
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, parts.fragment))


@trace
def render(
    data: str,
    config: RenderConfig | None = None,
    *,
    logo: str | Path | Image.Image | None = None,
    caption: str | None = None,
    glyphs: GlyphSource | None = None,
) -> Canvas:
    """Render *data* as a QR canvas with optional logo and caption.

    Args:
        data: Payload bytes for the QR symbol (already validated).
        config: Render settings; defaults when None.
        logo: Logo path or decoded image to center on the code.
        caption: Text drawn in a band below the code.
        glyphs: Font for the caption; loaded from ``config.font_path`` when None.

    Raises:
        QRBrandError subclasses; no stage output survives a failure.
    """
    config = (config or RenderConfig()).validate()

    # Resolve inputs up front so a bad logo or font fails before any pixel work.
    logo_img = None
    if logo is not None:
        logo_img = logo if isinstance(logo, Image.Image) else load_logo(logo)
    if caption is not None and glyphs is None:
        glyphs = GlyphSource.load(config.font_path)

    grid = make_module_grid(data, ecc=config.ecc)
    canvas = render_qr_rgba(grid, config.size, config.quiet_modules)

    if logo_img is not None:
        overlay_logo_center(canvas, logo_img, config.logo_scale, config.logo_plate, config.logo_pad)

    if caption is not None:
        canvas = add_text_below(canvas, caption, glyphs)

    return canvas


@trace
def save_png(canvas: Canvas, path: str | Path) -> Path:
    """Write *canvas* as an RGBA PNG, creating parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        canvas.to_image().save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageWriteError(f"Failed to write output PNG: {path} ({e})", param="out", value=str(path)) from e
    audit("render.saved", logger=log, path=str(path), image_px=f"{canvas.width}x{canvas.height}")
    return path
