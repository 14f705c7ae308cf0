"""
File and ZIP export of rendered slides.
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from .naming import slide_filename

if TYPE_CHECKING:
    from storyslides.pipeline import SlideImage

ARCHIVE_NAME = "carousel.zip"

logger = logging.getLogger(__name__)


def write_slides(slides: Sequence["SlideImage"], directory: str | Path, title: str) -> list[Path]:
    """
    Write every slide as its own JPEG file and return the written paths in order.
    """
    output_dir = Path(directory)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for slide in sorted(slides, key=lambda item: item.index):
        path = output_dir / slide_filename(slide.index, title)
        path.write_bytes(slide.data)
        written.append(path)
    logger.info("Wrote %d slides to %s", len(written), output_dir)
    return written


def build_zip(slides: Sequence["SlideImage"], title: str) -> bytes:
    """
    Pack the slides into an in-memory ZIP archive using sequential file names.
    """
    buffer = BytesIO()
    # JPEG data is already compressed.
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_STORED) as archive:
        for slide in sorted(slides, key=lambda item: item.index):
            archive.writestr(slide_filename(slide.index, title), slide.data)
    return buffer.getvalue()


def write_zip(slides: Sequence["SlideImage"], output_path: str | Path, title: str) -> Path:
    path = Path(output_path)
    if path.suffix.lower() != ".zip":
        path = path / ARCHIVE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_zip(slides, title))
    logger.info("Wrote slide archive %s", path)
    return path
