"""
Text styling options chosen by the user for every slide.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from storyslides.common import ConfigurationError

MIN_OUTLINE_WIDTH = 5
MAX_OUTLINE_WIDTH = 30


class FontStyle(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    BOLD = "bold"


class TextPosition(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


_STYLE_ALIASES = {
    "fontStyle": "font_style",
    "textColor": "text_color",
    "textPosition": "text_position",
    "backgroundOverlay": "background_overlay",
    "overlayOpacity": "overlay_opacity",
    "outlineWidth": "outline_width",
    "fontSize": "font_size",
    "showSlideNumbers": "show_slide_numbers",
    "showNumbers": "show_slide_numbers",
}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class StyleConfig:
    """
    Canonical representation of the slide text styling.

    Attributes
    ----------
    font_style:
        Font family group used for measuring and drawing.
    text_color:
        CSS-like colour string for the text fill (hex, ``rgb()``/``rgba()`` or a name).
    text_position:
        Vertical anchor of the text block.
    background_overlay:
        Whether a black veil is painted over the photo before the text.
    overlay_opacity:
        Alpha of that veil, between 0 and 1.
    outline_width:
        Outline thickness in pixels (5-30).
    font_size:
        Font size in pixels.
    show_slide_numbers:
        Draw an ``n/total`` badge in the top right corner.
    """

    font_style: FontStyle = FontStyle.MODERN
    text_color: str = "#FFFFFF"
    text_position: TextPosition = TextPosition.CENTER
    background_overlay: bool = False
    overlay_opacity: float = 0.5
    outline_width: int = 5
    font_size: int = 72
    show_slide_numbers: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "font_style", FontStyle(self.font_style))
            object.__setattr__(self, "text_position", TextPosition(self.text_position))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        if not str(self.text_color).strip():
            raise ConfigurationError("text_color must be a non-empty colour string.")
        if not 0.0 <= float(self.overlay_opacity) <= 1.0:
            raise ConfigurationError(
                f"overlay_opacity must be between 0 and 1, got {self.overlay_opacity!r}"
            )
        if not MIN_OUTLINE_WIDTH <= int(self.outline_width) <= MAX_OUTLINE_WIDTH:
            raise ConfigurationError(
                f"outline_width must be between {MIN_OUTLINE_WIDTH} and {MAX_OUTLINE_WIDTH}, "
                f"got {self.outline_width!r}"
            )
        if int(self.font_size) <= 0:
            raise ConfigurationError(f"font_size must be positive, got {self.font_size!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "StyleConfig":
        """
        Build a style from user settings, accepting snake_case or camelCase keys.
        """
        if not data:
            return cls()

        values: dict[str, Any] = {}
        for raw_key, raw_value in data.items():
            key = _STYLE_ALIASES.get(raw_key, raw_key)
            if key not in cls.__dataclass_fields__:
                raise ConfigurationError(f"Unknown style setting {raw_key!r}.")
            if raw_value is None:
                continue
            values[key] = raw_value

        try:
            if "background_overlay" in values:
                values["background_overlay"] = _coerce_bool(values["background_overlay"])
            if "show_slide_numbers" in values:
                values["show_slide_numbers"] = _coerce_bool(values["show_slide_numbers"])
            if "overlay_opacity" in values:
                values["overlay_opacity"] = float(values["overlay_opacity"])
            if "outline_width" in values:
                values["outline_width"] = int(values["outline_width"])
            if "font_size" in values:
                values["font_size"] = int(values["font_size"])
            if "text_color" in values:
                values["text_color"] = str(values["text_color"]).strip()
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid style settings: {dict(data)!r}") from exc

        return cls(**values)

    def as_dict(self) -> dict[str, Any]:
        return {
            "font_style": self.font_style.value,
            "text_color": self.text_color,
            "text_position": self.text_position.value,
            "background_overlay": self.background_overlay,
            "overlay_opacity": self.overlay_opacity,
            "outline_width": self.outline_width,
            "font_size": self.font_size,
            "show_slide_numbers": self.show_slide_numbers,
        }


DEFAULT_STYLE = StyleConfig()
