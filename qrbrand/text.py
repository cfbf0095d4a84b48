"""Single-line text layout: fit a string to a width, center it, rasterize glyphs.

Glyph shapes and metrics come from Pillow's FreeType bindings. Layout is done
here glyph by glyph (advance + pair kerning) so that sizing, placement and
blending stay under our control rather than ImageDraw's.
"""

import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from qrbrand.canvas import BLACK, Canvas
from qrbrand.errors import FontLoadError
from qrbrand.logging import audit, get_logger, trace

log = get_logger("text")

DEFAULT_FONT = "DejaVuSans.ttf"
_BASE_SIZE = 32

MARGIN_FRACTION = 0.06
MIN_MARGIN_PX = 24
START_SIZE_FRACTION = 0.35
MIN_START_SIZE = 18.0
MIN_FONT_SIZE = 14.0
SHRINK_FACTOR = 0.92


@dataclass
class TextLine:
    """Where and how big a caption is drawn."""
    font_size: float
    width: float
    baseline_y: float
    start_x: float
    margin: int


class ScaledFont:
    """A glyph source fixed at one (possibly fractional) pixel size."""

    def __init__(self, font: ImageFont.FreeTypeFont, size: float):
        self.font = font
        self.size = size
        self._advances: dict[str, float] = {}

    def advance(self, ch: str) -> float:
        if ch not in self._advances:
            self._advances[ch] = self.font.getlength(ch)
        return self._advances[ch]

    def kerning(self, prev: str, ch: str) -> float:
        """Pair adjustment: laid-out pair width minus the two lone advances."""
        return self.font.getlength(prev + ch) - self.advance(prev) - self.advance(ch)

    def v_metrics(self) -> tuple[float, float]:
        """(ascent, descent); descent is negative, below the baseline."""
        ascent, descent = self.font.getmetrics()
        return float(ascent), -float(descent)

    def coverage(self, ch: str) -> tuple[np.ndarray, int, int] | None:
        """8-bit coverage mask of *ch* and its offset from the pen on the baseline.

        Returns None for glyphs that cover no pixels (e.g. space).
        """
        x0, y0, x1, y1 = (int(v) for v in self.font.getbbox(ch, anchor="ls"))
        if x1 <= x0 or y1 <= y0:
            return None
        img = Image.new("L", (x1 - x0, y1 - y0), 0)
        ImageDraw.Draw(img).text((-x0, -y0), ch, fill=255, font=self.font, anchor="ls")
        mask = np.array(img, dtype=np.uint8)
        if not mask.any():
            return None
        return mask, x0, y0


class GlyphSource:
    """Outline font that can be scaled to any pixel size."""

    def __init__(self, font: ImageFont.FreeTypeFont, name: str):
        self._font = font
        self.name = name
        self._sizes: dict[float, ScaledFont] = {}

    @classmethod
    def load(cls, path: str | Path | None = None) -> "GlyphSource":
        """Load *path*, else the system DejaVu Sans, else Pillow's bundled font.

        Raises:
            FontLoadError: *path* is unreadable, or no FreeType font is available.
        """
        if path is not None:
            try:
                return cls(ImageFont.truetype(str(path), _BASE_SIZE), str(path))
            except OSError as e:
                raise FontLoadError(f"Failed to load font: {path} ({e})", param="font", value=str(path)) from e

        try:
            return cls(ImageFont.truetype(DEFAULT_FONT, _BASE_SIZE), DEFAULT_FONT)
        except OSError:
            log.debug("%s not found on this system, using Pillow's default font", DEFAULT_FONT)

        font = ImageFont.load_default(size=_BASE_SIZE)
        if not isinstance(font, ImageFont.FreeTypeFont):
            raise FontLoadError("No scalable font available (Pillow built without FreeType)",
                                param="font", value=None)
        return cls(font, "pillow-default")

    def at(self, size: float) -> ScaledFont:
        if size not in self._sizes:
            self._sizes[size] = ScaledFont(self._font.font_variant(size=size), size)
        return self._sizes[size]

    def __repr__(self):
        return f"GlyphSource({self.name!r})"


def measure_text_width(font: ScaledFont, text: str) -> float:
    """Sum of advances plus pair kerning, in character order."""
    x = 0.0
    prev = None
    for ch in text:
        if prev is not None:
            x += font.kerning(prev, ch)
        x += font.advance(ch)
        prev = ch
    return x


def text_margin(canvas_w: int) -> int:
    return max(round(canvas_w * MARGIN_FRACTION), MIN_MARGIN_PX)


def fit_font_size(glyphs: GlyphSource, text: str, max_width: float, band_height: int) -> tuple[float, float]:
    """Shrink from the band-derived start size by x0.92 until *text* fits.

    Stops at the first size whose width fits or once the size is at or
    below 14 px. Returns (font_size, width).
    """
    font_px = max(float(round(band_height * START_SIZE_FRACTION)), MIN_START_SIZE)
    while True:
        width = measure_text_width(glyphs.at(font_px), text)
        if width <= max_width or font_px <= MIN_FONT_SIZE:
            return font_px, width
        font_px *= SHRINK_FACTOR


def layout_text(glyphs: GlyphSource, text: str, canvas_w: int, band_top: int, band_height: int) -> TextLine:
    """Pick the font size and the pen start for one centered caption line."""
    margin = text_margin(canvas_w)
    max_text_w = max(canvas_w - 2 * margin, 0)

    font_px, text_w = fit_font_size(glyphs, text, max_text_w, band_height)

    ascent, descent = glyphs.at(font_px).v_metrics()
    text_h = math.ceil(ascent - descent)
    y_center = band_top + band_height / 2.0
    baseline_y = y_center + text_h / 2.0 - descent

    # Too-long text keeps the left margin and runs off the right edge.
    start_x = max((canvas_w - text_w) / 2.0, float(margin))

    return TextLine(font_size=font_px, width=text_w, baseline_y=baseline_y, start_x=start_x, margin=margin)


def draw_text_rgba(
    canvas: Canvas,
    font: ScaledFont,
    start_x: float,
    baseline_y: float,
    text: str,
    color: tuple[int, ...] = BLACK,
) -> None:
    """Rasterize *text* on one baseline, blending *color* by glyph coverage."""
    x = start_x
    prev = None
    origin_y = math.floor(baseline_y)

    for ch in text:
        if prev is not None:
            x += font.kerning(prev, ch)
        prev = ch

        glyph = font.coverage(ch)
        if glyph is not None:
            mask, dx, dy = glyph
            canvas.blend_mask(math.floor(x) + dx, origin_y + dy, mask, color)

        x += font.advance(ch)


@trace
def layout_and_draw(
    canvas: Canvas,
    text: str,
    band_top: int,
    band_height: int,
    glyphs: GlyphSource,
    color: tuple[int, ...] = BLACK,
) -> TextLine:
    """Lay out *text* inside the horizontal band and draw it onto *canvas*."""
    line = layout_text(glyphs, text, canvas.width, band_top, band_height)
    draw_text_rgba(canvas, glyphs.at(line.font_size), line.start_x, line.baseline_y, text, color)

    audit("text.drawn", logger=log,
          chars=len(text), font_px=round(line.font_size, 2), width=round(line.width, 1),
          start_x=round(line.start_x, 1), baseline_y=round(line.baseline_y, 1),
          overflow=line.start_x + line.width > canvas.width - line.margin)
    return line
