"""End-to-end rendering, configuration validation and PNG output."""
import numpy as np
import pytest
from PIL import Image

from qrbrand.config import RenderConfig
from qrbrand.errors import (
    ImageDecodeError,
    ImageWriteError,
    InvalidConfigError,
    InvalidLogoScaleError,
    InvalidURLError,
    QRBrandError,
    SizeTooSmallError,
)
from qrbrand.generator import make_module_grid
from qrbrand.logo import plate_rect
from qrbrand.pipeline import render, save_png, validate_url

URL = "https://example.com"


class TestValidateUrl:
    def test_accepts_absolute_url(self):
        assert validate_url(URL) == URL + "/"

    def test_strips_whitespace(self):
        assert validate_url("  https://example.com/a?b=1 ") == "https://example.com/a?b=1"

    @pytest.mark.parametrize("raw, normalized", [
        ("HTTPS://Example.com", "https://example.com/"),
        ("https://Example.COM:8443/Path/X", "https://example.com:8443/Path/X"),
        ("https://User@Example.com?q=A", "https://User@example.com/?q=A"),
        ("mailto:someone@example.com", "mailto:someone@example.com"),
    ])
    def test_normalizes_scheme_host_and_root_path(self, raw, normalized):
        assert validate_url(raw) == normalized

    @pytest.mark.parametrize("bad", ["not-a-valid-url", "example.com", "", "//example.com"])
    def test_rejects_missing_scheme(self, bad):
        with pytest.raises(InvalidURLError) as exc:
            validate_url(bad)
        assert "Invalid URL" in str(exc.value)
        assert exc.value.param == "url"


class TestRenderConfig:
    def test_defaults(self):
        config = RenderConfig()
        assert config.size == 1024
        assert config.quiet_modules == 4
        assert config.logo_scale == 0.20
        assert config.logo_plate is True
        assert config.logo_pad == 0.18
        assert config.ecc == "H"
        assert config.validate() is config

    def test_frozen(self):
        with pytest.raises(AttributeError):
            RenderConfig().size = 10

    @pytest.mark.parametrize("kwargs,param", [
        ({"size": 0}, "size"),
        ({"quiet_modules": -1}, "quiet_modules"),
        ({"logo_pad": -0.1}, "logo_pad"),
        ({"ecc": "X"}, "ecc"),
    ])
    def test_invalid_values(self, kwargs, param):
        with pytest.raises(InvalidConfigError) as exc:
            RenderConfig(**kwargs).validate()
        assert exc.value.param == param

    @pytest.mark.parametrize("scale", [0.04, 0.40])
    def test_invalid_logo_scale(self, scale):
        with pytest.raises(InvalidLogoScaleError):
            RenderConfig(logo_scale=scale).validate()


class TestRender:
    def test_default_render_is_square(self):
        canvas = render(URL)
        n = make_module_grid(URL).n
        assert canvas.width == canvas.height
        assert canvas.width <= 1024
        assert canvas.width % (n + 8) == 0

    def test_logo_changes_only_plate_region(self, make_logo):
        plain = render(URL)
        branded = render(URL, logo=make_logo(400, 400, (200, 30, 30, 255)))
        assert plain.size == branded.size

        w = plain.width
        target = round(w * 0.20)
        x0, y0, pw, ph = plate_rect(w, w, target, target, 0.18)

        diff = (plain.pixels != branded.pixels).any(axis=-1)
        assert diff.any()
        ys, xs = np.nonzero(diff)
        assert ys.min() >= y0 and ys.max() < y0 + ph
        assert xs.min() >= x0 and xs.max() < x0 + pw

    def test_logo_from_path(self, tmp_path):
        path = tmp_path / "logo.png"
        Image.new("RGBA", (60, 30), (0, 0, 255, 255)).save(path)
        canvas = render(URL, RenderConfig(size=400), logo=path)
        assert canvas.width == canvas.height

    def test_caption_extends_height(self, glyphs):
        plain = render(URL, RenderConfig(size=400))
        captioned = render(URL, RenderConfig(size=400), caption=URL, glyphs=glyphs)
        assert captioned.width == plain.width
        assert captioned.height == plain.height + 120
        assert np.array_equal(captioned.pixels[:plain.height], plain.pixels)

    def test_caption_loads_default_font(self):
        canvas = render(URL, RenderConfig(size=400), caption="scan me")
        assert canvas.height > canvas.width

    def test_size_too_small(self):
        with pytest.raises(SizeTooSmallError):
            render(URL, RenderConfig(size=40))

    def test_bad_logo_fails_before_rendering(self, tmp_path):
        with pytest.raises(ImageDecodeError):
            render(URL, logo=tmp_path / "missing.png")

    def test_invalid_scale_fails(self, make_logo):
        with pytest.raises(InvalidLogoScaleError):
            render(URL, RenderConfig(logo_scale=0.5), logo=make_logo(10, 10))

    def test_errors_share_base_class(self):
        with pytest.raises(QRBrandError):
            render(URL, RenderConfig(size=10))


class TestSavePng:
    def test_writes_rgba_png(self, tmp_path):
        canvas = render(URL, RenderConfig(size=300))
        out = save_png(canvas, tmp_path / "nested" / "qr.png")

        assert out.exists()
        with Image.open(out) as img:
            assert img.format == "PNG"
            assert img.mode == "RGBA"
            assert img.size == canvas.size
            assert np.array_equal(np.array(img), canvas.pixels)

    def test_unwritable_path(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("x")
        canvas = render(URL, RenderConfig(size=300))
        with pytest.raises(ImageWriteError) as exc:
            save_png(canvas, blocker / "qr.png")
        assert exc.value.param == "out"
        assert not (blocker / "qr.png").exists()
