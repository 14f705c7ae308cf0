"""
Raster composition of a single slide: photo, optional veil, outlined text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, ImageDraw, ImageOps, UnidentifiedImageError

from storyslides.common import ImageDecodeError, SurfaceUnavailableError
from storyslides.layout import (
    DEFAULT_LAYOUT_CONFIG,
    FontRegistry,
    LayoutConfig,
    StyleConfig,
    TextLayout,
    compute_layout,
    outline_color_for,
    to_rgba,
)

logger = logging.getLogger(__name__)

JPEG_QUALITY = 92
SLIDE_MEDIA_TYPE = "image/jpeg"

BADGE_FONT_SIZE = 36
BADGE_MARGIN = 40


@dataclass(frozen=True)
class CoverFit:
    """Scaled photo size and the crop box that centres it on the canvas."""

    width: int
    height: int
    left: int
    top: int

    def crop_box(self, canvas_width: int, canvas_height: int) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.left + canvas_width, self.top + canvas_height)


def cover_fit_box(
    source_width: int,
    source_height: int,
    canvas_width: int,
    canvas_height: int,
) -> CoverFit:
    """
    Scale uniformly so the photo covers the canvas, then centre the overflow.
    """
    if source_width <= 0 or source_height <= 0:
        raise ImageDecodeError(f"Background has an empty size {source_width}x{source_height}.")

    source_aspect = source_width / source_height
    canvas_aspect = canvas_width / canvas_height
    if source_aspect > canvas_aspect:
        height = canvas_height
        width = max(canvas_width, round(canvas_height * source_aspect))
    else:
        width = canvas_width
        height = max(canvas_height, round(canvas_width / source_aspect))

    return CoverFit(
        width=width,
        height=height,
        left=(width - canvas_width) // 2,
        top=(height - canvas_height) // 2,
    )


class SlideCompositor:
    """
    Paints slides onto a fixed-size canvas and encodes them as JPEG.

    Every call works on its own canvas and font objects, so one compositor
    can serve several worker threads at once.
    """

    def __init__(
        self,
        *,
        font_registry: FontRegistry | None = None,
        layout_config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
        jpeg_quality: int = JPEG_QUALITY,
    ) -> None:
        self.font_registry = font_registry or FontRegistry()
        self.layout_config = layout_config
        self.jpeg_quality = jpeg_quality

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.layout_config.canvas_width, self.layout_config.canvas_height)

    def layout(self, text: str, style: StyleConfig) -> TextLayout:
        """Lay out ``text`` measured with the font that will draw it."""
        metrics = self.font_registry.metrics(style.font_style, style.font_size)
        return compute_layout(text, style, metrics=metrics, config=self.layout_config)

    def render(
        self,
        background: bytes,
        text: str,
        style: StyleConfig,
        *,
        slide_number: int | None = None,
        slide_total: int | None = None,
    ) -> bytes:
        return self.compose(
            background,
            self.layout(text, style),
            style,
            slide_number=slide_number,
            slide_total=slide_total,
        )

    def compose(
        self,
        background: bytes,
        layout: TextLayout,
        style: StyleConfig,
        *,
        slide_number: int | None = None,
        slide_total: int | None = None,
    ) -> bytes:
        canvas = self.compose_image(
            background,
            layout,
            style,
            slide_number=slide_number,
            slide_total=slide_total,
        )
        try:
            return self._encode(canvas)
        except (MemoryError, ValueError, OSError) as exc:
            raise SurfaceUnavailableError("Could not encode the slide canvas.") from exc

    def compose_image(
        self,
        background: bytes,
        layout: TextLayout,
        style: StyleConfig,
        *,
        slide_number: int | None = None,
        slide_total: int | None = None,
    ) -> Image.Image:
        """
        Paint the slide and return it as an RGB image, before JPEG encoding.
        """
        photo = self._decode(background)
        try:
            canvas = self._cover(photo)
            if style.background_overlay:
                self._draw_overlay(canvas, style.overlay_opacity)

            # ImageDraw replaces RGBA pixels; fills must blend over the outlines.
            stroke_layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            fill_layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
            stroke_draw = ImageDraw.Draw(stroke_layer)
            fill_draw = ImageDraw.Draw(fill_layer)
            self._draw_text(stroke_draw, fill_draw, layout, style)
            if style.show_slide_numbers and slide_number is not None:
                self._draw_badge(stroke_draw, fill_draw, style, slide_number, slide_total)

            canvas = Image.alpha_composite(canvas, stroke_layer)
            canvas = Image.alpha_composite(canvas, fill_layer)
            return canvas.convert("RGB")
        except (MemoryError, ValueError, OSError) as exc:
            raise SurfaceUnavailableError("Could not draw the slide canvas.") from exc

    # ------------------------------------------------------------------ background

    @staticmethod
    def _decode(background: bytes) -> Image.Image:
        try:
            image = Image.open(BytesIO(background))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError("Background photo could not be decoded.") from exc
        return ImageOps.exif_transpose(image)

    def _cover(self, photo: Image.Image) -> Image.Image:
        canvas_width, canvas_height = self.canvas_size
        fit = cover_fit_box(photo.width, photo.height, canvas_width, canvas_height)
        scaled = photo.convert("RGBA").resize((fit.width, fit.height), Image.Resampling.LANCZOS)
        cropped = scaled.crop(fit.crop_box(canvas_width, canvas_height))

        canvas = Image.new("RGBA", self.canvas_size, (0, 0, 0, 255))
        return Image.alpha_composite(canvas, cropped)

    @staticmethod
    def _draw_overlay(canvas: Image.Image, opacity: float) -> None:
        veil = Image.new("RGBA", canvas.size, (0, 0, 0, round(opacity * 255)))
        canvas.alpha_composite(veil)

    # ------------------------------------------------------------------ text

    def _draw_text(
        self,
        stroke_draw: ImageDraw.ImageDraw,
        fill_draw: ImageDraw.ImageDraw,
        layout: TextLayout,
        style: StyleConfig,
    ) -> None:
        font = self.font_registry.load_font(style.font_style, style.font_size)
        fill = to_rgba(style.text_color)
        outline = to_rgba(layout.outline_color)
        # Pillow strokes outward from the glyph edge; a canvas stroke of the
        # same width is centred on it, so only half of it shows outside.
        stroke_width = max(1, round(style.outline_width / 2))
        center_x = self.layout_config.canvas_width / 2

        for line, y in zip(layout.lines, layout.line_positions()):
            if not line:
                continue
            for _ in range(layout.stroke_count):
                stroke_draw.text(
                    (center_x, y),
                    line,
                    font=font,
                    fill=outline,
                    anchor="mm",
                    stroke_width=stroke_width,
                    stroke_fill=outline,
                )
            fill_draw.text((center_x, y), line, font=font, fill=fill, anchor="mm")

    def _draw_badge(
        self,
        stroke_draw: ImageDraw.ImageDraw,
        fill_draw: ImageDraw.ImageDraw,
        style: StyleConfig,
        slide_number: int,
        slide_total: int | None,
    ) -> None:
        label = f"{slide_number}/{slide_total}" if slide_total else str(slide_number)
        font = self.font_registry.load_font(style.font_style, BADGE_FONT_SIZE)
        outline = to_rgba(outline_color_for(style.text_color))
        position = (self.layout_config.canvas_width - BADGE_MARGIN, BADGE_MARGIN)
        stroke_draw.text(
            position,
            label,
            font=font,
            fill=outline,
            anchor="rt",
            stroke_width=2,
            stroke_fill=outline,
        )
        fill_draw.text(position, label, font=font, fill=to_rgba(style.text_color), anchor="rt")

    # ------------------------------------------------------------------ encode

    def _encode(self, canvas: Image.Image) -> bytes:
        buffer = BytesIO()
        canvas.convert("RGB").save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()
