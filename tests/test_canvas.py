"""Pixel canvas: blending, clipping and copies."""
import numpy as np
import pytest
from PIL import Image

from qrbrand.canvas import BLACK, WHITE, Canvas, blend_over

RED = (255, 0, 0, 255)


def test_blend_black_over_white_full_alpha():
    assert blend_over(WHITE, BLACK, 255) == BLACK


def test_blend_red_over_white_half_alpha():
    r, g, b, a = blend_over(WHITE, RED, 128)
    assert r == 255
    assert g < 255
    assert b < 255
    assert a == 255


def test_blend_zero_alpha_keeps_destination():
    assert blend_over((10, 20, 30, 255), RED, 0) == (10, 20, 30, 255)


def test_new_canvas_is_filled_and_sized():
    canvas = Canvas.new(7, 3)
    assert canvas.size == (7, 3)
    assert canvas.pixels.shape == (3, 7, 4)
    assert (canvas.pixels == 255).all()


def test_put_pixel_out_of_bounds_is_ignored():
    canvas = Canvas.new(4, 4)
    before = canvas.pixels.copy()
    canvas.put_pixel(-1, 0, BLACK)
    canvas.put_pixel(4, 0, BLACK)
    canvas.put_pixel(0, 9, BLACK)
    assert np.array_equal(canvas.pixels, before)


def test_get_pixel_out_of_bounds_raises():
    with pytest.raises(IndexError):
        Canvas.new(2, 2).get_pixel(2, 0)


def test_fill_rect_draws_inside():
    canvas = Canvas.new(10, 10, BLACK)
    canvas.fill_rect(2, 2, 3, 3, WHITE)

    assert canvas.get_pixel(2, 2) == WHITE
    assert canvas.get_pixel(4, 4) == WHITE
    assert canvas.get_pixel(0, 0) == BLACK
    assert canvas.get_pixel(5, 5) == BLACK
    assert canvas.get_pixel(9, 9) == BLACK


def test_fill_rect_clips_silently():
    canvas = Canvas.new(10, 10, BLACK)
    canvas.fill_rect(-5, 8, 30, 30, WHITE)

    assert canvas.get_pixel(0, 9) == WHITE
    assert canvas.get_pixel(9, 8) == WHITE
    assert canvas.get_pixel(0, 7) == BLACK


def test_fill_rect_fully_outside_is_noop():
    canvas = Canvas.new(10, 10, BLACK)
    canvas.fill_rect(20, 20, 5, 5, WHITE)
    assert (canvas.pixels[..., :3] == 0).all()


def test_blend_pixel_matches_blend_over():
    canvas = Canvas.new(3, 3)
    canvas.blend_pixel(1, 1, RED, 128)
    assert canvas.get_pixel(1, 1) == blend_over(WHITE, RED, 128)
    canvas.blend_pixel(5, 5, RED, 255)


def test_blend_mask_matches_scalar_blend_and_clips():
    canvas = Canvas.new(4, 4)
    mask = np.array([[0, 128], [255, 64]], dtype=np.uint8)
    canvas.blend_mask(3, 3, mask, BLACK)

    assert canvas.get_pixel(3, 3) == WHITE
    assert canvas.get_pixel(2, 2) == WHITE

    canvas.blend_mask(0, 0, mask, BLACK)
    assert canvas.get_pixel(0, 0) == WHITE
    assert canvas.get_pixel(1, 0) == blend_over(WHITE, BLACK, 128)
    assert canvas.get_pixel(0, 1) == BLACK
    assert canvas.get_pixel(1, 1) == blend_over(WHITE, BLACK, 64)


def test_blend_mask_negative_offset():
    canvas = Canvas.new(2, 2)
    mask = np.full((3, 3), 255, dtype=np.uint8)
    canvas.blend_mask(-2, -2, mask, BLACK)

    assert canvas.get_pixel(0, 0) == BLACK
    assert canvas.get_pixel(1, 0) == WHITE
    assert canvas.get_pixel(0, 1) == WHITE


def test_paste_copies_without_aliasing():
    src = Canvas.new(2, 2, BLACK)
    dst = Canvas.new(4, 4)
    dst.paste(src, 1, 1)
    src.fill_rect(0, 0, 2, 2, RED)

    assert dst.get_pixel(1, 1) == BLACK
    assert dst.get_pixel(2, 2) == BLACK
    assert dst.get_pixel(0, 0) == WHITE
    assert dst.get_pixel(3, 3) == WHITE


def test_composite_uses_source_alpha():
    dst = Canvas.new(3, 1)
    src = Canvas(np.array([[[255, 0, 0, 255], [255, 0, 0, 0], [0, 0, 0, 128]]], dtype=np.uint8))
    dst.composite(src, 0, 0)

    assert dst.get_pixel(0, 0) == RED
    assert dst.get_pixel(1, 0) == WHITE
    r, g, b, a = dst.get_pixel(2, 0)
    assert a == 255
    assert 120 <= r <= 130 and r == g == b


def test_image_round_trip_preserves_pixels():
    img = Image.new("RGB", (5, 4), (12, 34, 56))
    canvas = Canvas.from_image(img)
    assert canvas.get_pixel(4, 3) == (12, 34, 56, 255)
    assert canvas.to_image().mode == "RGBA"
    assert canvas.to_image().size == (5, 4)


def test_rejects_non_rgba_arrays():
    with pytest.raises(ValueError):
        Canvas(np.zeros((2, 2, 3), dtype=np.uint8))
