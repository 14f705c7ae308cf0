"""
Render a finished carousel into a printable PDF slide book.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import Frame, Paragraph

if TYPE_CHECKING:
    from storyslides.pipeline import SlideImage


@dataclass(frozen=True)
class BookLayoutConfig:
    page_background: colors.Color
    cover_background: colors.Color
    title_color: colors.Color
    caption_color: colors.Color


DEFAULT_BOOK_LAYOUT = BookLayoutConfig(
    page_background=colors.HexColor("#111111"),
    cover_background=colors.HexColor("#1F1B2E"),
    title_color=colors.white,
    caption_color=colors.HexColor("#BBBBBB"),
)


PAGE_SIZES = {
    "a4": A4,
    "letter": LETTER,
    # Same 4:5 proportions as the slides themselves.
    "slide": (540.0, 675.0),
}


class SlideBookPDFBuilder:
    """
    Lay out rendered slides one per page, optionally behind a title cover.
    """

    def __init__(
        self,
        *,
        page_size: tuple[float, float] = PAGE_SIZES["slide"],
        margin_mm: float = 0.0,
        layout: BookLayoutConfig = DEFAULT_BOOK_LAYOUT,
        include_cover: bool = True,
        show_captions: bool = False,
    ) -> None:
        self.page_size = page_size
        self.margin = margin_mm * mm
        self.layout = layout
        self.include_cover = include_cover
        self.show_captions = show_captions

        self.title_style = ParagraphStyle(
            name="BookTitle",
            fontName="Helvetica-Bold",
            fontSize=28,
            leading=32,
            alignment=TA_CENTER,
            textColor=self.layout.title_color,
            spaceAfter=12,
        )
        self.subtitle_style = ParagraphStyle(
            name="BookSubtitle",
            fontName="Helvetica",
            fontSize=14,
            leading=18,
            alignment=TA_CENTER,
            textColor=self.layout.caption_color,
        )
        self.footer_style = ParagraphStyle(
            name="Footer",
            fontName="Helvetica-Oblique",
            fontSize=9,
            leading=11,
            alignment=TA_CENTER,
            textColor=self.layout.caption_color,
        )

    def build(self, slides: Sequence["SlideImage"], output_path: Path | str, *, title: str = "") -> Path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(self.build_bytes(slides, title=title))
        return output_file

    def build_bytes(self, slides: Sequence["SlideImage"], *, title: str = "") -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.page_size)
        pdf.setTitle(title or "Carousel")
        width, height = self.page_size

        ordered = sorted(slides, key=lambda item: item.index)
        if self.include_cover and title:
            self._draw_cover_page(pdf, title, len(ordered), width, height)

        for slide in ordered:
            self._draw_slide_page(pdf, slide, len(ordered), width, height)

        pdf.save()
        return buffer.getvalue()

    # ------------------------------------------------------------------ pages

    def _draw_cover_page(
        self,
        pdf: canvas.Canvas,
        title: str,
        total: int,
        width: float,
        height: float,
    ) -> None:
        pdf.setFillColor(self.layout.cover_background)
        pdf.rect(0, 0, width, height, stroke=0, fill=1)

        inset = max(self.margin, 24)
        frame = Frame(inset, inset, width - 2 * inset, height - 2 * inset, showBoundary=0)
        frame.addFromList(
            [
                Paragraph(escape(title), self.title_style),
                Paragraph(f"{total} slides", self.subtitle_style),
            ],
            pdf,
        )
        pdf.showPage()

    def _draw_slide_page(
        self,
        pdf: canvas.Canvas,
        slide: "SlideImage",
        total: int,
        width: float,
        height: float,
    ) -> None:
        pdf.setFillColor(self.layout.page_background)
        pdf.rect(0, 0, width, height, stroke=0, fill=1)

        footer_space = 24 if self.show_captions else 0
        box_width = width - 2 * self.margin
        box_height = height - 2 * self.margin - footer_space
        scale = min(box_width / slide.width, box_height / slide.height)
        draw_width = slide.width * scale
        draw_height = slide.height * scale
        x = (width - draw_width) / 2
        y = footer_space + (height - footer_space - draw_height) / 2
        pdf.drawImage(
            ImageReader(BytesIO(slide.data)),
            x,
            y,
            draw_width,
            draw_height,
            preserveAspectRatio=True,
        )

        if self.show_captions:
            self._draw_footer(pdf, f"Slide {slide.index + 1} of {total}", width)
        pdf.showPage()

    def _draw_footer(self, pdf: canvas.Canvas, text: str, width: float) -> None:
        footer_frame = Frame(self.margin, 4, width - 2 * self.margin, 20, showBoundary=0)
        footer_frame.addFromList([Paragraph(text, self.footer_style)], pdf)
