"""
Colour parsing used to pick a contrasting outline for the slide text.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from PIL import ImageColor

logger = logging.getLogger(__name__)

LIGHT_AVERAGE_THRESHOLD = 200
DARK_TEXT_OUTLINE = "#FFFFFF"
LIGHT_TEXT_OUTLINE = "#000000"

_HEX_PATTERN = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$")
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


class RGBColor(NamedTuple):
    red: int
    green: int
    blue: int

    @property
    def average(self) -> float:
        return (self.red + self.green + self.blue) / 3


# Literal spellings recognised when nothing else matches.
NAMED_COLORS: dict[str, RGBColor] = {
    "white": RGBColor(255, 255, 255),
    "black": RGBColor(0, 0, 0),
}


def _channel(value: str) -> int:
    return max(0, min(255, int(float(value))))


def parse_color(value: str | None) -> RGBColor | None:
    """
    Parse 3/6-digit hex, ``rgb()``/``rgba()`` or a known colour name.

    Returns ``None`` for anything else.
    """
    if value is None:
        return None

    normalized = str(value).strip().lower()
    hex_match = _HEX_PATTERN.match(normalized)
    if hex_match:
        digits = hex_match.group(1)
        if len(digits) == 3:
            digits = "".join(char * 2 for char in digits)
        return RGBColor(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    if normalized.startswith("rgb"):
        numbers = _NUMBER_PATTERN.findall(normalized)
        if len(numbers) >= 3:
            return RGBColor(_channel(numbers[0]), _channel(numbers[1]), _channel(numbers[2]))
        return None

    return NAMED_COLORS.get(normalized)


def is_light_color(value: str | None, threshold: float = LIGHT_AVERAGE_THRESHOLD) -> bool:
    color = parse_color(value)
    if color is None:
        return False
    return color.average > threshold


def outline_color_for(value: str | None, threshold: float = LIGHT_AVERAGE_THRESHOLD) -> str:
    """
    Black outline for light text, white outline for dark or unrecognised text.
    """
    return LIGHT_TEXT_OUTLINE if is_light_color(value, threshold) else DARK_TEXT_OUTLINE


def to_rgba(value: str) -> tuple[int, int, int, int]:
    """
    Resolve a fill colour for drawing, including CSS-style fractional alpha.
    """
    try:
        return ImageColor.getcolor(value, "RGBA")
    except ValueError:
        pass

    normalized = value.strip().lower()
    if normalized.startswith("rgba"):
        numbers = _NUMBER_PATTERN.findall(normalized)
        if len(numbers) >= 4:
            alpha = float(numbers[3])
            alpha = alpha * 255 if alpha <= 1 else alpha
            return (
                _channel(numbers[0]),
                _channel(numbers[1]),
                _channel(numbers[2]),
                max(0, min(255, round(alpha))),
            )

    parsed = parse_color(value)
    if parsed is not None:
        return (*parsed, 255)

    logger.warning("Unrecognised text colour %r; drawing text in black.", value)
    return (0, 0, 0, 255)
