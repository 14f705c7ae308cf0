"""
Common utilities shared across storyslides modules.
"""

from .errors import (
    ConfigurationError,
    ImageDecodeError,
    PhotoSourceError,
    SlideGenerationError,
    StaleGenerationError,
    StorySlidesError,
    SurfaceUnavailableError,
)
from .sources import PhotoSource, load_mapping_file, load_photo, resolve_request_timeout

__all__ = [
    "StorySlidesError",
    "ConfigurationError",
    "PhotoSourceError",
    "ImageDecodeError",
    "SurfaceUnavailableError",
    "SlideGenerationError",
    "StaleGenerationError",
    "PhotoSource",
    "load_photo",
    "load_mapping_file",
    "resolve_request_timeout",
]
