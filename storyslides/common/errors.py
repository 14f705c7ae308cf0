"""
Exception hierarchy shared across the storyslides modules.
"""

from __future__ import annotations


class StorySlidesError(Exception):
    """Base class for every error raised by storyslides."""


class ConfigurationError(StorySlidesError, ValueError):
    """A split or style configuration value is out of range."""


class PhotoSourceError(StorySlidesError):
    """A background photo could not be read from its source."""


class ImageDecodeError(StorySlidesError):
    """The background photo bytes are not a decodable image."""


class SurfaceUnavailableError(StorySlidesError):
    """No raster surface could be allocated or drawn on."""


class SlideGenerationError(StorySlidesError):
    """
    Raised by the orchestrator when a render run fails.

    The slide index that failed is kept on ``index`` (``None`` when the
    failure happened before any slide was rendered).
    """

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class StaleGenerationError(StorySlidesError):
    """A newer generation started before this one could publish its slides."""

    def __init__(self, generation: int, latest: int) -> None:
        super().__init__(f"Generation {generation} superseded by generation {latest}.")
        self.generation = generation
        self.latest = latest
