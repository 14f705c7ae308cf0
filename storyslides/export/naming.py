"""
Sequential file names for exported slides.
"""

from __future__ import annotations

import re

DEFAULT_TITLE_PART = "Carousel"
TITLE_WORD_LIMIT = 3

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def title_slug(title: str, *, word_limit: int = TITLE_WORD_LIMIT) -> str:
    """
    Title-case the first few words of ``title`` and join them with underscores.
    """
    words = []
    for word in title.split()[:word_limit]:
        cleaned = _NON_ALPHANUMERIC.sub("", word)
        if cleaned:
            words.append(cleaned[0].upper() + cleaned[1:].lower())
    return "_".join(words) or DEFAULT_TITLE_PART


def slide_filename(index: int, title: str, *, extension: str = "jpg") -> str:
    """
    ``001_First_Three_Words.jpg`` style name for the zero-based slide ``index``.
    """
    return f"{index + 1:03d}_{title_slug(title)}.{extension}"
