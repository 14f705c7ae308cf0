"""
Slide rasterization on top of the background photo.
"""

from .compositor import (
    JPEG_QUALITY,
    SLIDE_MEDIA_TYPE,
    CoverFit,
    SlideCompositor,
    cover_fit_box,
)

__all__ = [
    "JPEG_QUALITY",
    "SLIDE_MEDIA_TYPE",
    "CoverFit",
    "SlideCompositor",
    "cover_fit_box",
]
