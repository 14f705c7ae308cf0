"""
Pure layout computations for the text block of a single slide.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from .colors import outline_color_for
from .fonts import FontMetrics, StandardFontMetrics
from .style import DEFAULT_STYLE, StyleConfig, TextPosition


@dataclass(frozen=True)
class LayoutConfig:
    """Canvas geometry and the thresholds used while laying out text."""

    canvas_width: int = 1080
    canvas_height: int = 1350
    side_margin: int = 80
    anchor_padding: int = 80
    anchor_gap: int = 20
    edge_gap: int = 10
    line_height_factor: float = 1.4
    light_threshold: float = 200
    stroke_threshold: int = 10
    stroke_step: int = 8

    @property
    def max_text_width(self) -> int:
        return self.canvas_width - 2 * self.side_margin


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


@dataclass(frozen=True)
class TextLayout:
    """
    Wrapped lines of one slide and where to draw them.

    ``anchor_y`` is the centre the block was aimed at; ``start_y`` is the
    centre of the first line after the block was clamped inside the canvas.
    """

    lines: tuple[str, ...]
    anchor_y: float
    start_y: float
    line_height: float
    outline_color: str
    stroke_count: int

    @property
    def text_height(self) -> float:
        return len(self.lines) * self.line_height

    @property
    def clamp_offset(self) -> float:
        return self.start_y - (self.anchor_y - self.text_height / 2)

    def line_positions(self) -> list[float]:
        return [self.start_y + index * self.line_height for index in range(len(self.lines))]


def stroke_count_for(outline_width: int, config: LayoutConfig = DEFAULT_LAYOUT_CONFIG) -> int:
    if outline_width > config.stroke_threshold:
        return math.ceil(outline_width / config.stroke_step)
    return 1


def wrap_text(text: str, measure: Callable[[str], float], max_width: float) -> list[str]:
    """
    Greedily pack words into lines no wider than ``max_width``.

    A word wider than the limit keeps a line to itself.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate

    if current:
        lines.append(current)
    return lines or [text]


def anchor_y_for(
    position: TextPosition,
    text_height: float,
    outline_width: int,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> float:
    outline_pad = outline_width / 2
    if position is TextPosition.TOP:
        return config.anchor_padding + text_height / 2 + outline_pad + config.anchor_gap
    if position is TextPosition.BOTTOM:
        return (
            config.canvas_height
            - config.anchor_padding
            - text_height / 2
            - outline_pad
            - config.anchor_gap
        )
    return config.canvas_height / 2


def clamp_start_y(
    start_y: float,
    line_count: int,
    line_height: float,
    font_size: int,
    outline_width: int,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> float:
    """
    Shift the whole block so the first and last lines stay inside the canvas.
    """
    edge = font_size / 2 + outline_width / 2 + config.edge_gap
    if start_y < edge:
        start_y = edge

    span = (line_count - 1) * line_height
    lowest = config.canvas_height - edge
    if start_y + span > lowest:
        start_y = lowest - span
    return start_y


def compute_layout(
    text: str,
    style: StyleConfig = DEFAULT_STYLE,
    *,
    metrics: FontMetrics | None = None,
    config: LayoutConfig = DEFAULT_LAYOUT_CONFIG,
) -> TextLayout:
    """
    Wrap ``text`` and place it on the canvas according to ``style``.

    Text is measured with ``metrics`` when given, otherwise with the core PDF
    font metrics of the style's font family.
    """
    measurer = metrics or StandardFontMetrics(style.font_style, style.font_size)
    lines = wrap_text(text, measurer.measure, config.max_text_width)

    line_height = style.font_size * config.line_height_factor
    text_height = len(lines) * line_height
    anchor_y = anchor_y_for(style.text_position, text_height, style.outline_width, config)
    start_y = clamp_start_y(
        anchor_y - text_height / 2,
        len(lines),
        line_height,
        style.font_size,
        style.outline_width,
        config,
    )

    return TextLayout(
        lines=tuple(lines),
        anchor_y=anchor_y,
        start_y=start_y,
        line_height=line_height,
        outline_color=outline_color_for(style.text_color, config.light_threshold),
        stroke_count=stroke_count_for(style.outline_width, config),
    )
