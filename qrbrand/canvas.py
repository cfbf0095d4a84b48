"""Pixel canvas: an owned RGBA buffer with clipped writes and alpha blending.

Pixels live in a ``numpy.uint8`` array of shape ``(height, width, 4)``.
All writes clip to the canvas; coordinates outside it are dropped silently.
"""

import numpy as np
from PIL import Image

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def blend_over(dst: tuple[int, ...], src: tuple[int, ...], a: int) -> tuple[int, int, int, int]:
    """Blend opaque *src* over *dst* with coverage *a* (0-255). Result is opaque."""
    inv = 255 - a
    return (
        (src[0] * a + dst[0] * inv) // 255,
        (src[1] * a + dst[1] * inv) // 255,
        (src[2] * a + dst[2] * inv) // 255,
        255,
    )


def _clip(x0: int, y0: int, w: int, h: int, width: int, height: int):
    """Intersect a rect with the canvas; returns (dst slice, src slice) or None."""
    cx0, cy0 = max(x0, 0), max(y0, 0)
    cx1, cy1 = min(x0 + w, width), min(y0 + h, height)
    if cx0 >= cx1 or cy0 >= cy1:
        return None
    dst = (slice(cy0, cy1), slice(cx0, cx1))
    src = (slice(cy0 - y0, cy1 - y0), slice(cx0 - x0, cx1 - x0))
    return dst, src


class Canvas:
    """Mutable RGBA pixel buffer."""

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4 or pixels.dtype != np.uint8:
            raise ValueError(f"expected uint8 array of shape (H, W, 4), got {pixels.dtype} {pixels.shape}")
        self.pixels = pixels

    @classmethod
    def new(cls, width: int, height: int, color: tuple[int, ...] = WHITE) -> "Canvas":
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Canvas":
        """Copy a Pillow image into a new canvas (converted to RGBA)."""
        return cls(np.array(image.convert("RGBA"), dtype=np.uint8))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        if not self.in_bounds(x, y):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} canvas")
        return tuple(int(c) for c in self.pixels[y, x])

    def put_pixel(self, x: int, y: int, color: tuple[int, ...]) -> None:
        if self.in_bounds(x, y):
            self.pixels[y, x] = color

    def fill_rect(self, x0: int, y0: int, w: int, h: int, color: tuple[int, ...]) -> None:
        """Opaque fill of a rectangle, clipped to the canvas."""
        clipped = _clip(x0, y0, w, h, self.width, self.height)
        if clipped is not None:
            self.pixels[clipped[0]] = color

    def blend_pixel(self, x: int, y: int, color: tuple[int, ...], alpha: int) -> None:
        if self.in_bounds(x, y):
            self.pixels[y, x] = blend_over(tuple(int(c) for c in self.pixels[y, x]), color, alpha)

    def blend_mask(self, x0: int, y0: int, mask: np.ndarray, color: tuple[int, ...]) -> None:
        """Blend opaque *color* through an 8-bit coverage *mask* placed at (x0, y0).

        Same arithmetic as :func:`blend_over`, applied to the whole region.
        """
        h, w = mask.shape
        clipped = _clip(x0, y0, w, h, self.width, self.height)
        if clipped is None:
            return
        dst_sl, src_sl = clipped
        a = mask[src_sl].astype(np.uint32)[..., None]
        dst = self.pixels[dst_sl][..., :3].astype(np.uint32)
        src = np.array(color[:3], dtype=np.uint32)
        out = (src * a + dst * (255 - a)) // 255
        self.pixels[dst_sl + (slice(0, 3),)] = out.astype(np.uint8)
        self.pixels[dst_sl + (3,)] = 255

    def paste(self, src: "Canvas", x: int = 0, y: int = 0) -> None:
        """Copy *src* pixels verbatim onto this canvas at (x, y)."""
        clipped = _clip(x, y, src.width, src.height, self.width, self.height)
        if clipped is not None:
            self.pixels[clipped[0]] = src.pixels[clipped[1]]

    def composite(self, src: "Canvas", x: int = 0, y: int = 0) -> None:
        """Source-over composite *src* at (x, y) using its per-pixel alpha."""
        clipped = _clip(x, y, src.width, src.height, self.width, self.height)
        if clipped is None:
            return
        dst_sl, src_sl = clipped
        fg = src.pixels[src_sl].astype(np.float64) / 255.0
        bg = self.pixels[dst_sl].astype(np.float64) / 255.0
        fa, ba = fg[..., 3:4], bg[..., 3:4]
        out_a = fa + ba * (1.0 - fa)
        safe_a = np.where(out_a > 0, out_a, 1.0)
        out_rgb = (fg[..., :3] * fa + bg[..., :3] * ba * (1.0 - fa)) / safe_a
        out = np.concatenate([out_rgb, out_a], axis=-1)
        self.pixels[dst_sl] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)

    def __repr__(self):
        return f"Canvas({self.width}x{self.height})"
