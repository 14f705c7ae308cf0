"""
Story segmentation into slide-sized text chunks.
"""

from .segmenter import (
    DEFAULT_SPLIT_CONFIG,
    SplitConfig,
    StorySegmenter,
    adjust_slide_count,
    first_sentence,
    segment_story,
    split_by_character_budget,
    split_on_punctuation,
    split_sentences,
)

__all__ = [
    "DEFAULT_SPLIT_CONFIG",
    "SplitConfig",
    "StorySegmenter",
    "adjust_slide_count",
    "first_sentence",
    "segment_story",
    "split_by_character_budget",
    "split_on_punctuation",
    "split_sentences",
]
