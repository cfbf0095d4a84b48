"""Caption band: grow the canvas downwards and print a line of text in the new space."""

from qrbrand.canvas import BLACK, Canvas
from qrbrand.logging import audit, get_logger, trace
from qrbrand.text import GlyphSource, layout_and_draw

log = get_logger("caption")

BAND_FRACTION = 0.18
MIN_BAND_PX = 120


def caption_band_height(qr_height: int) -> int:
    """Band height for one line of text with padding: 18% of the QR, at least 120 px."""
    return max(round(qr_height * BAND_FRACTION), MIN_BAND_PX)


@trace
def add_text_below(qr: Canvas, text: str, glyphs: GlyphSource, color: tuple[int, ...] = BLACK) -> Canvas:
    """Return a new, taller canvas: *qr* on top, *text* centered in a white band below."""
    qr_w, qr_h = qr.size
    band_h = caption_band_height(qr_h)

    out = Canvas.new(qr_w, qr_h + band_h)
    out.paste(qr, 0, 0)

    line = layout_and_draw(out, text, qr_h, band_h, glyphs, color)

    audit("caption.added", logger=log,
          text=text[:80], band_px=band_h, image_px=f"{out.width}x{out.height}",
          font_px=round(line.font_size, 2))
    return out
