"""
Shared fixtures for the storyslides test suite.
"""

import os
import sys
from io import BytesIO

import pytest
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from storyslides.common import ImageDecodeError  # noqa: E402


def make_photo(size=(200, 100), color=(30, 120, 200), fmt="JPEG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FixedWidthMetrics:
    """Every character is ``width`` pixels wide."""

    def __init__(self, width: float = 10.0) -> None:
        self.width = width

    def measure(self, text: str) -> float:
        return len(text) * self.width


class RecordingCompositor:
    """
    Stand-in compositor that encodes the slide text instead of pixels.

    Texts containing ``fail_marker`` raise, and ``on_render`` runs before
    each slide so tests can interleave other calls.
    """

    canvas_size = (1080, 1350)

    def __init__(self, fail_marker: str | None = None, on_render=None) -> None:
        self.fail_marker = fail_marker
        self.on_render = on_render
        self.calls = []

    def render(self, background, text, style, *, slide_number=None, slide_total=None):
        self.calls.append((slide_number, text, background))
        if self.on_render is not None:
            self.on_render(slide_number, text)
        if self.fail_marker and self.fail_marker in text:
            raise ImageDecodeError("broken background")
        return f"{slide_number}/{slide_total}:{text}".encode("utf-8")


@pytest.fixture
def photo_bytes() -> bytes:
    return make_photo()


@pytest.fixture
def other_photo_bytes() -> bytes:
    return make_photo(size=(100, 300), color=(200, 40, 40))


@pytest.fixture
def fixed_metrics() -> FixedWidthMetrics:
    return FixedWidthMetrics()


@pytest.fixture
def compositor_factory():
    return RecordingCompositor
