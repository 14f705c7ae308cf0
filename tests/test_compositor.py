from io import BytesIO

import pytest
from PIL import Image

from storyslides.common import ImageDecodeError, SlideGenerationError, SurfaceUnavailableError
from storyslides.compositing import SLIDE_MEDIA_TYPE, SlideCompositor, cover_fit_box
from storyslides.layout import FontRegistry, StyleConfig, TextPosition
from storyslides.pipeline import CarouselOrchestrator


@pytest.fixture
def compositor():
    return SlideCompositor(font_registry=FontRegistry(search_roots=[]))


def _open(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


def _close_to(pixel, expected, tolerance=12):
    return all(abs(channel - target) <= tolerance for channel, target in zip(pixel, expected))


class FlakyEncoderCompositor(SlideCompositor):
    """Compositor whose JPEG encoder can be switched off."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.encoder_broken = False

    def _encode(self, canvas):
        if self.encoder_broken:
            raise OSError("encoder unavailable")
        return super()._encode(canvas)


class TestCoverFit:
    def test_wide_photo_is_cropped_horizontally(self):
        fit = cover_fit_box(200, 100, 1080, 1350)

        assert (fit.width, fit.height) == (2700, 1350)
        assert (fit.left, fit.top) == (810, 0)
        assert fit.crop_box(1080, 1350) == (810, 0, 1890, 1350)

    def test_tall_photo_is_cropped_vertically(self):
        fit = cover_fit_box(100, 300, 1080, 1350)

        assert (fit.width, fit.height) == (1080, 3240)
        assert (fit.left, fit.top) == (0, 945)

    def test_exact_aspect_needs_no_crop(self):
        fit = cover_fit_box(540, 675, 1080, 1350)

        assert (fit.width, fit.height, fit.left, fit.top) == (1080, 1350, 0, 0)

    def test_empty_photo_is_rejected(self):
        with pytest.raises(ImageDecodeError):
            cover_fit_box(0, 10, 1080, 1350)


class TestSlideCompositor:
    def test_renders_portrait_jpeg(self, compositor, photo_bytes):
        data = compositor.render(photo_bytes, "Once upon a time", StyleConfig())

        image = _open(data)
        assert image.format == "JPEG"
        assert image.size == (1080, 1350)
        assert SLIDE_MEDIA_TYPE == "image/jpeg"

    def test_photo_fills_the_corners(self, compositor, photo_bytes):
        image = _open(compositor.render(photo_bytes, "Hi", StyleConfig())).convert("RGB")

        assert _close_to(image.getpixel((5, 5)), (30, 120, 200))
        assert _close_to(image.getpixel((1074, 1344)), (30, 120, 200))

    def test_overlay_darkens_the_photo(self, compositor, photo_bytes):
        style = StyleConfig(background_overlay=True, overlay_opacity=1.0)

        image = _open(compositor.render(photo_bytes, "Hi", style)).convert("RGB")

        assert _close_to(image.getpixel((5, 5)), (0, 0, 0))

    def test_text_changes_pixels_at_its_anchor(self, compositor, photo_bytes):
        style = StyleConfig(text_position=TextPosition.CENTER, text_color="#FFFFFF", font_size=120)

        plain = _open(compositor.render(photo_bytes, "", style)).convert("RGB")
        lettered = _open(compositor.render(photo_bytes, "MMMMMMMM", style)).convert("RGB")

        band = (200, 500, 880, 700)
        assert plain.crop(band).tobytes() != lettered.crop(band).tobytes()

    def test_slide_number_badge_is_drawn(self, compositor, photo_bytes):
        style = StyleConfig(show_slide_numbers=True)

        with_badge = compositor.render(photo_bytes, "Hi", style, slide_number=2, slide_total=9)
        without_badge = compositor.render(photo_bytes, "Hi", StyleConfig(), slide_number=2, slide_total=9)

        corner = (880, 20, 1060, 100)
        assert (
            _open(with_badge).convert("RGB").crop(corner).tobytes()
            != _open(without_badge).convert("RGB").crop(corner).tobytes()
        )

    def test_undecodable_background_raises(self, compositor):
        with pytest.raises(ImageDecodeError):
            compositor.render(b"definitely not an image", "Hi", StyleConfig())

    def test_png_with_transparency_is_composited_on_black(self, compositor):
        buffer = BytesIO()
        Image.new("RGBA", (80, 100), (255, 0, 0, 0)).save(buffer, format="PNG")

        image = _open(compositor.render(buffer.getvalue(), "", StyleConfig())).convert("RGB")

        assert _close_to(image.getpixel((5, 5)), (0, 0, 0))

    def test_layout_uses_registry_metrics(self, compositor):
        layout = compositor.layout(" ".join(["story"] * 40), StyleConfig())

        assert len(layout.lines) > 1
        assert layout.line_height == pytest.approx(72 * 1.4)

    def test_translucent_fill_blends_over_outline(self, compositor):
        buffer = BytesIO()
        Image.new("RGB", (400, 500), (0, 0, 255)).save(buffer, format="PNG")
        style = StyleConfig(text_color="rgba(255, 255, 255, 0.5)", outline_width=30, font_size=200)

        image = compositor.compose_image(buffer.getvalue(), compositor.layout("HI", style), style)
        colors = [color for _count, color in image.getcolors(maxcolors=1080 * 1350)]

        assert image.mode == "RGB"
        assert any(_close_to(color, (128, 128, 128), tolerance=3) for color in colors)
        assert not any(_close_to(color, (128, 128, 255), tolerance=20) for color in colors)


class TestSurfaceFailures:
    def test_encoder_failure_raises_surface_unavailable(self, photo_bytes):
        compositor = FlakyEncoderCompositor(font_registry=FontRegistry(search_roots=[]))
        compositor.encoder_broken = True

        with pytest.raises(SurfaceUnavailableError) as excinfo:
            compositor.render(photo_bytes, "Hi", StyleConfig())

        assert isinstance(excinfo.value.__cause__, OSError)

    def test_orchestrator_keeps_published_slides_when_surface_fails(self, photo_bytes):
        compositor = FlakyEncoderCompositor(font_registry=FontRegistry(search_roots=[]))
        orchestrator = CarouselOrchestrator(compositor=compositor, max_workers=1)
        published = orchestrator.generate(photo_bytes, "One. Two.", "Title")
        compositor.encoder_broken = True

        with pytest.raises(SlideGenerationError) as excinfo:
            orchestrator.generate(photo_bytes, "Something else entirely.", "Other")

        assert excinfo.value.index == 0
        assert isinstance(excinfo.value.__cause__, SurfaceUnavailableError)
        assert list(orchestrator.slides) == published
        assert orchestrator.slide_texts == ("Title", "One.", "Two.")
