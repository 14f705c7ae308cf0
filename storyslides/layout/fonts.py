"""
Font resolution and text measurement for the three slide font styles.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics

from .style import FontStyle

logger = logging.getLogger(__name__)

PathLike = str | Path

# Family stacks, most preferred first, mirrored by the file candidates below.
FONT_FAMILY_STACKS: dict[FontStyle, tuple[str, ...]] = {
    FontStyle.MODERN: ("Helvetica", "Arial", "DejaVu Sans", "Liberation Sans"),
    FontStyle.CLASSIC: ("Georgia", "DejaVu Serif", "Liberation Serif"),
    FontStyle.BOLD: ("Impact", "Arial Black", "DejaVu Sans Bold", "Liberation Sans Bold"),
}

FONT_FILE_CANDIDATES: dict[FontStyle, tuple[str, ...]] = {
    FontStyle.MODERN: (
        "Helvetica.ttc",
        "Arial.ttf",
        "arial.ttf",
        "DejaVuSans.ttf",
        "LiberationSans-Regular.ttf",
    ),
    FontStyle.CLASSIC: (
        "Georgia.ttf",
        "georgia.ttf",
        "DejaVuSerif.ttf",
        "LiberationSerif-Regular.ttf",
    ),
    FontStyle.BOLD: (
        "Impact.ttf",
        "impact.ttf",
        "Arial Black.ttf",
        "ariblk.ttf",
        "DejaVuSans-Bold.ttf",
        "LiberationSans-Bold.ttf",
    ),
}

# PDF core fonts whose metrics ship with reportlab; no font files are needed.
STANDARD_FACES: dict[FontStyle, str] = {
    FontStyle.MODERN: "Helvetica",
    FontStyle.CLASSIC: "Times-Roman",
    FontStyle.BOLD: "Helvetica-Bold",
}


class FontMetrics(Protocol):
    def measure(self, text: str) -> float:
        ...


class StandardFontMetrics:
    """
    Measures text with the PDF core font metrics for a font style.
    """

    def __init__(self, font_style: FontStyle | str, font_size: float) -> None:
        self.face = STANDARD_FACES[FontStyle(font_style)]
        self.font_size = font_size

    def measure(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self.face, self.font_size)


class TrueTypeFontMetrics:
    """
    Measures text with the Pillow font that will actually draw it.
    """

    def __init__(self, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> None:
        self.font = font

    def measure(self, text: str) -> float:
        return float(self.font.getlength(text))


def _default_search_roots() -> list[Path]:
    roots: list[Path] = []
    extra = os.getenv("STORYSLIDES_FONT_DIRS", "")
    for chunk in extra.split(os.pathsep):
        if chunk.strip():
            roots.append(Path(chunk.strip()).expanduser())

    roots.extend(
        [
            Path("/Library/Fonts"),
            Path("/System/Library/Fonts"),
            Path.home() / "Library" / "Fonts",
            Path("C:/Windows/Fonts"),
            Path("/usr/share/fonts"),
            Path("/usr/local/share/fonts"),
            Path.home() / ".fonts",
        ]
    )
    return roots


class FontRegistry:
    """
    Locates a TrueType face for each font style.

    Only file paths are cached; every caller gets its own font object so that
    concurrent renders never share a FreeType face.
    """

    def __init__(
        self,
        *,
        search_roots: Sequence[PathLike] | None = None,
        extra_roots: Sequence[PathLike] = (),
        font_files: Mapping[FontStyle | str, PathLike] | None = None,
    ) -> None:
        base_roots = (
            [Path(root) for root in search_roots] if search_roots is not None else _default_search_roots()
        )
        self._search_roots = [Path(root).expanduser() for root in extra_roots] + base_roots
        self._explicit = {FontStyle(style): Path(path) for style, path in (font_files or {}).items()}
        self._resolved: dict[FontStyle, Path | None] = {}
        self._file_index: dict[str, Path] | None = None
        self._lock = threading.Lock()

    def font_path(self, font_style: FontStyle | str) -> Path | None:
        style = FontStyle(font_style)
        with self._lock:
            if style not in self._resolved:
                self._resolved[style] = self._resolve(style)
            return self._resolved[style]

    def load_font(
        self, font_style: FontStyle | str, font_size: int
    ) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        path = self.font_path(font_style)
        if path is not None:
            try:
                return ImageFont.truetype(str(path), font_size)
            except OSError:
                logger.exception("Failed to load font %s; using Pillow's default font.", path)
        return ImageFont.load_default(size=font_size)

    def metrics(self, font_style: FontStyle | str, font_size: int) -> TrueTypeFontMetrics:
        return TrueTypeFontMetrics(self.load_font(font_style, font_size))

    def _resolve(self, style: FontStyle) -> Path | None:
        explicit = self._explicit.get(style)
        if explicit is not None:
            if explicit.exists():
                return explicit
            logger.warning("Configured font %s for %s does not exist.", explicit, style.value)

        index = self._index_font_files()
        for candidate in FONT_FILE_CANDIDATES[style]:
            found = index.get(candidate.lower())
            if found is not None:
                logger.debug("Using %s for the %s font style.", found, style.value)
                return found

        logger.warning(
            "None of %s found for the %s font style; falling back to Pillow's default font.",
            ", ".join(FONT_FAMILY_STACKS[style]),
            style.value,
        )
        return None

    def _index_font_files(self) -> dict[str, Path]:
        if self._file_index is not None:
            return self._file_index

        index: dict[str, Path] = {}
        for root in self._search_roots:
            if not root.is_dir():
                continue
            for dirpath, _dirnames, filenames in os.walk(root):
                for filename in filenames:
                    if filename.lower().endswith((".ttf", ".ttc", ".otf")):
                        index.setdefault(filename.lower(), Path(dirpath) / filename)
        self._file_index = index
        return index
