"""
Deterministic splitting of a free-form story into slide-sized segments.

The split runs in four stages, each working on the output of the previous one:

1. sentence boundaries (runs of ``.``, ``!`` or ``?`` followed by whitespace),
2. clause punctuation (commas, semicolons and dashes) for sentences that are
   still longer than the per-slide budget,
3. whitespace packing for anything that is still too long,
4. a single count adjustment that merges or expands segments so the total
   lands between ``min_slides`` and ``max_slides`` where the text allows it.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from storyslides.common import ConfigurationError

logger = logging.getLogger(__name__)

_SENTENCE_END = re.compile(r"([.!?]+)\s+")
# A hyphen only counts as a dash when it does not glue two words together.
_CLAUSE_BREAK = re.compile(r"([,;—–]|-(?!\w))(\s*)")

_CONFIG_ALIASES = {
    "maxCharsPerSlide": "max_chars_per_slide",
    "minSlides": "min_slides",
    "maxSlides": "max_slides",
    "expandThreshold": "expand_threshold",
    "bisectThreshold": "bisect_threshold",
}


@dataclass(frozen=True)
class SplitConfig:
    """
    Limits that drive the story split.

    Attributes
    ----------
    max_chars_per_slide:
        Character budget of a single segment.
    min_slides / max_slides:
        Target range for the number of segments.
    expand_threshold:
        Segments longer than this are split up front when there are too few.
    bisect_threshold:
        The longest segment is halved repeatedly while it is longer than this
        and the count is still below ``min_slides``.
    """

    max_chars_per_slide: int = 125
    min_slides: int = 8
    max_slides: int = 20
    expand_threshold: int = 100
    bisect_threshold: int = 50

    def __post_init__(self) -> None:
        if self.max_chars_per_slide < 1:
            raise ConfigurationError("max_chars_per_slide must be at least 1.")
        if self.min_slides < 1 or self.max_slides < 1:
            raise ConfigurationError("min_slides and max_slides must be at least 1.")
        if self.min_slides > self.max_slides:
            raise ConfigurationError(
                f"min_slides ({self.min_slides}) must not exceed max_slides ({self.max_slides})."
            )
        if self.expand_threshold < 0 or self.bisect_threshold < 0:
            raise ConfigurationError("Expansion thresholds must not be negative.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "SplitConfig":
        if not data:
            return cls()

        values: dict[str, int] = {}
        for raw_key, raw_value in data.items():
            key = _CONFIG_ALIASES.get(raw_key, raw_key)
            if key not in cls.__dataclass_fields__:
                raise ConfigurationError(f"Unknown split setting {raw_key!r}.")
            if raw_value is None:
                continue
            try:
                values[key] = int(raw_value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"Split setting {raw_key!r} must be an integer, got {raw_value!r}"
                ) from exc
        return cls(**values)

    def as_dict(self) -> dict[str, int]:
        return {
            "max_chars_per_slide": self.max_chars_per_slide,
            "min_slides": self.min_slides,
            "max_slides": self.max_slides,
            "expand_threshold": self.expand_threshold,
            "bisect_threshold": self.bisect_threshold,
        }


DEFAULT_SPLIT_CONFIG = SplitConfig()


def split_sentences(text: str) -> list[str]:
    """
    Cut ``text`` after every run of sentence punctuation followed by whitespace.

    An unterminated tail is kept as the last sentence.
    """
    sentences: list[str] = []
    last_index = 0
    for match in _SENTENCE_END.finditer(text):
        sentence = text[last_index : match.end(1)].strip()
        if sentence:
            sentences.append(sentence)
        last_index = match.end()

    remaining = text[last_index:].strip()
    if remaining:
        sentences.append(remaining)
    return sentences


def first_sentence(text: str) -> str:
    sentences = split_sentences(text.strip())
    return sentences[0] if sentences else ""


def split_on_punctuation(sentence: str, max_chars: int) -> list[str]:
    """
    Greedily regroup a long sentence at commas, semicolons and dashes.

    Clause pieces are appended to a running buffer while it stays within
    ``max_chars``; the buffer is flushed when the next piece would overflow.
    """
    if len(sentence) <= max_chars:
        return [sentence]

    segments: list[str] = []
    buffer = ""
    joiner = ""
    last_index = 0
    for match in _CLAUSE_BREAK.finditer(sentence):
        piece = sentence[last_index : match.end(1)].strip()
        candidate = _join(buffer, joiner, piece)
        if len(candidate) <= max_chars:
            buffer = candidate
        else:
            if buffer:
                segments.append(buffer)
            buffer = piece
        joiner = " " if match.group(2) else ""
        last_index = match.end()

    remaining = sentence[last_index:].strip()
    if buffer:
        candidate = _join(buffer, joiner, remaining)
        if len(candidate) <= max_chars:
            segments.append(candidate)
        else:
            segments.append(buffer)
            if remaining:
                segments.append(remaining)
    elif remaining:
        segments.append(remaining)

    return segments or [sentence]


def _join(buffer: str, joiner: str, piece: str) -> str:
    if not buffer:
        return piece
    if not piece:
        return buffer
    return f"{buffer}{joiner}{piece}"


def split_by_character_budget(text: str, max_chars: int) -> list[str]:
    """
    Pack whitespace-separated words into chunks of at most ``max_chars``.

    Words are never broken; a word longer than the budget forms its own chunk.
    """
    chunks: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_chars:
            current = candidate
        else:
            if current:
                chunks.append(current)
            current = word

    if current:
        chunks.append(current)
    return chunks


def adjust_slide_count(segments: Sequence[str], config: SplitConfig = DEFAULT_SPLIT_CONFIG) -> list[str]:
    """
    Merge or expand ``segments`` towards the configured slide range.

    Too many segments are merged in consecutive batches of
    ``ceil(n / max_slides)``. Too few are expanded in two passes: long
    segments are split up front, then the longest remaining segment is halved
    until the minimum is met or nothing is longer than ``bisect_threshold``.
    """
    count = len(segments)
    if count == 0:
        return []

    if count > config.max_slides:
        step = math.ceil(count / config.max_slides)
        merged = [" ".join(segments[start : start + step]) for start in range(0, count, step)]
        return merged[: config.max_slides]

    if count < config.min_slides:
        pieces_per_segment = math.ceil(config.min_slides / count)
        expanded: list[str] = []
        for segment in segments:
            if (
                len(segment) > config.expand_threshold
                and len(expanded) + pieces_per_segment <= config.min_slides
            ):
                budget = math.ceil(len(segment) / pieces_per_segment)
                expanded.extend(split_by_character_budget(segment, budget))
            else:
                expanded.append(segment)

        while len(expanded) < config.min_slides:
            longest_index = _longest_splittable_index(expanded)
            if longest_index is None:
                break
            longest = expanded[longest_index]
            if len(longest) <= config.bisect_threshold:
                break
            halves = split_by_character_budget(longest, math.ceil(len(longest) / 2))
            if len(halves) < 2:
                break
            expanded[longest_index : longest_index + 1] = halves

        # TODO: confirm whether clamping here may drop bisected tail segments.
        return expanded[: config.max_slides]

    return list(segments)


def _longest_splittable_index(segments: Sequence[str]) -> int | None:
    """
    Index of the longest segment that holds more than one word.

    Single words cannot be halved and are skipped; ties go to the first one.
    """
    longest: int | None = None
    for index, segment in enumerate(segments):
        if len(segment.split()) < 2:
            continue
        if longest is None or len(segment) > len(segments[longest]):
            longest = index
    return longest


def segment_story(text: str, config: SplitConfig | None = None) -> list[str]:
    """
    Split ``text`` into an ordered list of slide segments.

    Returns an empty list when the text is blank.
    """
    return StorySegmenter(config).split(text)


class StorySegmenter:
    """
    Splits stories into slide segments using a fixed :class:`SplitConfig`.
    """

    def __init__(self, config: SplitConfig | None = None) -> None:
        self._config = config or DEFAULT_SPLIT_CONFIG

    @property
    def config(self) -> SplitConfig:
        return self._config

    def split(self, text: str) -> list[str]:
        if not text or not text.strip():
            return []

        max_chars = self._config.max_chars_per_slide
        sentences = split_sentences(text.strip())

        clauses: list[str] = []
        for sentence in sentences:
            if len(sentence) > max_chars:
                clauses.extend(split_on_punctuation(sentence, max_chars))
            else:
                clauses.append(sentence)

        chunks: list[str] = []
        for clause in clauses:
            if len(clause) > max_chars:
                chunks.extend(split_by_character_budget(clause, max_chars))
            else:
                chunks.append(clause)

        segments = adjust_slide_count(chunks, self._config)
        logger.debug(
            "Story split: %d sentences, %d clauses, %d chunks, %d segments.",
            len(sentences),
            len(clauses),
            len(chunks),
            len(segments),
        )
        return segments
