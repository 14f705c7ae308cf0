"""
storyslides package exposing story segmentation, slide layout, rendering and export.
"""

from .compositing import SlideCompositor
from .export import SlideBookPDFBuilder, build_zip, slide_filename, write_slides
from .layout import StyleConfig, compute_layout
from .pipeline import CarouselOrchestrator, CarouselPackage, SlideImage, plan_slides
from .segmentation import SplitConfig, segment_story

__version__ = "0.1.0"

__all__ = [
    "CarouselOrchestrator",
    "CarouselPackage",
    "SlideBookPDFBuilder",
    "SlideCompositor",
    "SlideImage",
    "SplitConfig",
    "StyleConfig",
    "build_zip",
    "compute_layout",
    "plan_slides",
    "segment_story",
    "slide_filename",
    "write_slides",
]
