"""Logo handling: decode, aspect-fit and composite a centered logo onto the QR."""

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from qrbrand.canvas import WHITE, Canvas
from qrbrand.errors import ImageDecodeError, InvalidLogoScaleError
from qrbrand.logging import audit, get_logger, trace

log = get_logger("logo")

MIN_LOGO_SCALE = 0.05
MAX_LOGO_SCALE = 0.35


@trace
def load_logo(path: str | Path) -> Image.Image:
    """Decode a logo file to RGBA. Sources without alpha come out opaque."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as e:
        raise ImageDecodeError(f"Failed to open logo image: {path} ({e})", param="image", value=str(path)) from e


@trace
def resize_fit(img: Image.Image, max_w: int, max_h: int) -> Image.Image:
    """Shrink *img* to fit inside (max_w, max_h), keeping its aspect ratio.

    Never enlarges. Images with a zero dimension are returned as a copy.
    """
    w, h = img.size
    if w == 0 or h == 0:
        return img.copy()

    scale = min(max_w / w, max_h / h, 1.0)
    new_w = max(round(w * scale), 1)
    new_h = max(round(h * scale), 1)
    if (new_w, new_h) == (w, h):
        return img.copy()
    return img.resize((new_w, new_h), Image.LANCZOS)


def check_logo_scale(scale: float) -> None:
    if not (MIN_LOGO_SCALE <= scale <= MAX_LOGO_SCALE):
        raise InvalidLogoScaleError(
            f"--logo-scale should be between {MIN_LOGO_SCALE} and {MAX_LOGO_SCALE} "
            f"for scan reliability (got {scale})",
            param="logo_scale", value=scale,
        )


def plate_rect(canvas_w: int, canvas_h: int, logo_w: int, logo_h: int, pad: float) -> tuple[int, int, int, int]:
    """(x0, y0, w, h) of the white plate centered behind a logo_w x logo_h logo."""
    pad_px = round(max(logo_w, logo_h) * pad)
    plate_w = logo_w + 2 * pad_px
    plate_h = logo_h + 2 * pad_px
    return (canvas_w - plate_w) // 2, (canvas_h - plate_h) // 2, plate_w, plate_h


@trace
def overlay_logo_center(
    canvas: Canvas,
    logo: Image.Image,
    logo_scale: float = 0.20,
    logo_plate: bool = True,
    logo_pad: float = 0.18,
) -> None:
    """Composite *logo* onto the middle of *canvas*, in place.

    Args:
        canvas: Rendered QR canvas (mutated).
        logo: Decoded logo, any mode; its alpha channel drives the blend.
        logo_scale: Logo box side as a fraction of canvas width, 0.05-0.35.
        logo_plate: Draw an opaque white plate behind the logo first.
        logo_pad: Plate padding as a fraction of the logo's larger side.

    Raises:
        InvalidLogoScaleError: *logo_scale* is outside [0.05, 0.35].
    """
    check_logo_scale(logo_scale)

    qr_w, qr_h = canvas.size
    target = round(qr_w * logo_scale)
    resized = resize_fit(logo.convert("RGBA"), target, target)
    lw, lh = resized.size

    x0 = (qr_w - lw) // 2
    y0 = (qr_h - lh) // 2

    if logo_plate:
        px, py, pw, ph = plate_rect(qr_w, qr_h, lw, lh, logo_pad)
        canvas.fill_rect(px, py, pw, ph, WHITE)

    canvas.composite(Canvas.from_image(resized), x0, y0)

    audit("logo.composited", logger=log,
          qr_size=f"{qr_w}x{qr_h}", logo_size=f"{lw}x{lh}",
          scale=logo_scale, plate=logo_plate, pad=logo_pad)
