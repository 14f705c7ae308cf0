"""
Export helpers for rendered slides: file names, folders, ZIP and PDF.
"""

from .archive import ARCHIVE_NAME, build_zip, write_slides, write_zip
from .naming import slide_filename, title_slug
from .pdf import PAGE_SIZES, SlideBookPDFBuilder

__all__ = [
    "ARCHIVE_NAME",
    "PAGE_SIZES",
    "SlideBookPDFBuilder",
    "build_zip",
    "slide_filename",
    "title_slug",
    "write_slides",
    "write_zip",
]
