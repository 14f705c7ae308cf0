"""
Per-slide background photo overrides.
"""

from __future__ import annotations

from typing import Iterator, Mapping


class PhotoOverrides:
    """
    Sparse mapping of slide index to replacement photo bytes.

    Slides without an entry use the carousel's default photo.
    """

    def __init__(self, photos: Mapping[int, bytes] | None = None) -> None:
        self._photos: dict[int, bytes] = {}
        for index, photo in (photos or {}).items():
            self.set(index, photo)

    def set(self, index: int, photo: bytes) -> None:
        if index < 0:
            raise IndexError(f"Slide index must not be negative, got {index}.")
        self._photos[index] = bytes(photo)

    def reset(self, index: int) -> bool:
        return self._photos.pop(index, None) is not None

    def clear(self) -> None:
        self._photos.clear()

    def apply_to_all(self, source_index: int, count: int) -> bool:
        """Copy the photo of ``source_index`` onto every slide below ``count``."""
        photo = self._photos.get(source_index)
        if photo is None:
            return False
        for index in range(count):
            self._photos[index] = photo
        return True

    def prune(self, count: int) -> None:
        """Forget overrides for slides that no longer exist."""
        for index in [index for index in self._photos if index >= count]:
            del self._photos[index]

    def photo_for(self, index: int, default: bytes) -> bytes:
        return self._photos.get(index, default)

    def snapshot(self) -> dict[int, bytes]:
        return dict(self._photos)

    def __contains__(self, index: object) -> bool:
        return index in self._photos

    def __len__(self) -> int:
        return len(self._photos)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._photos))
