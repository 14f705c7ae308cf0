"""
Text layout for slides: styling, colour contrast, fonts and line placement.
"""

from .colors import RGBColor, is_light_color, outline_color_for, parse_color, to_rgba
from .engine import (
    DEFAULT_LAYOUT_CONFIG,
    LayoutConfig,
    TextLayout,
    anchor_y_for,
    clamp_start_y,
    compute_layout,
    stroke_count_for,
    wrap_text,
)
from .fonts import FontMetrics, FontRegistry, StandardFontMetrics, TrueTypeFontMetrics
from .style import DEFAULT_STYLE, FontStyle, StyleConfig, TextPosition

__all__ = [
    "DEFAULT_LAYOUT_CONFIG",
    "DEFAULT_STYLE",
    "FontMetrics",
    "FontRegistry",
    "FontStyle",
    "LayoutConfig",
    "RGBColor",
    "StandardFontMetrics",
    "StyleConfig",
    "TextLayout",
    "TextPosition",
    "TrueTypeFontMetrics",
    "anchor_y_for",
    "clamp_start_y",
    "compute_layout",
    "is_light_color",
    "outline_color_for",
    "parse_color",
    "stroke_count_for",
    "to_rgba",
    "wrap_text",
]
