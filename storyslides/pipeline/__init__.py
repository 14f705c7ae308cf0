"""
End-to-end orchestration from story text and photo to ordered slides.
"""

from .overrides import PhotoOverrides
from .pipeline import (
    CarouselOrchestrator,
    CarouselPackage,
    ProgressCallback,
    SlideImage,
    plan_slides,
)

__all__ = [
    "CarouselOrchestrator",
    "CarouselPackage",
    "PhotoOverrides",
    "ProgressCallback",
    "SlideImage",
    "plan_slides",
]
