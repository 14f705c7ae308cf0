"""
Orchestrates story splitting and slide rendering into an ordered carousel.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

import yaml

from storyslides.common import (
    ConfigurationError,
    PhotoSource,
    SlideGenerationError,
    StaleGenerationError,
    StorySlidesError,
    load_photo,
)
from storyslides.compositing import SLIDE_MEDIA_TYPE, SlideCompositor
from storyslides.export.naming import slide_filename
from storyslides.layout import DEFAULT_STYLE, StyleConfig
from storyslides.segmentation import SplitConfig, StorySegmenter, first_sentence

from .overrides import PhotoOverrides

ProgressCallback = Callable[[str, dict[str, Any]], None]

logger = logging.getLogger(__name__)

# Marker for "use whatever override is registered for the slide".
_REGISTERED = object()


@dataclass(frozen=True)
class SlideImage:
    """One rendered slide. Replaced wholesale, never edited in place."""

    index: int
    text: str
    data: bytes = field(repr=False)
    width: int = 1080
    height: int = 1350
    media_type: str = SLIDE_MEDIA_TYPE

    def filename(self, title: str) -> str:
        return slide_filename(self.index, title)


@dataclass
class CarouselPackage:
    """Replayable description of a carousel: texts and settings, no pixels."""

    title: str
    story: str
    slide_texts: list[str]
    style: StyleConfig = DEFAULT_STYLE
    split_config: SplitConfig = field(default_factory=SplitConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "story": self.story,
            "style": self.style.as_dict(),
            "split_config": self.split_config.as_dict(),
            "slides": [
                {
                    "index": index,
                    "filename": slide_filename(index, self.title),
                    "text": text,
                }
                for index, text in enumerate(self.slide_texts)
            ],
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CarouselPackage":
        if "slides" not in payload:
            raise ValueError("Carousel package payload must include 'slides'.")

        slides_payload = payload.get("slides") or []
        indexed: list[tuple[int, str]] = []
        for entry in slides_payload:
            try:
                indexed.append((int(entry["index"]), str(entry["text"])))
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Invalid slide entry: {entry}") from exc
        indexed.sort()

        return cls(
            title=str(payload.get("title") or "").strip(),
            story=str(payload.get("story") or ""),
            slide_texts=[text for _, text in indexed],
            style=StyleConfig.from_mapping(payload.get("style")),
            split_config=SplitConfig.from_mapping(payload.get("split_config")),
        )

    @classmethod
    def from_yaml(cls, source: str | Path) -> "CarouselPackage":
        path = Path(source)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError("Carousel package YAML must deserialize to a mapping.")
        return cls.from_dict(data)


def plan_slides(story: str, title: str = "", segmenter: StorySegmenter | None = None) -> list[str]:
    """
    Slide texts for a story: a lead slide followed by the story segments.

    With a title the lead slide is the title and the whole story is split.
    Without one the lead slide is the story's first sentence and only the
    rest of the story is split.
    """
    if not story or not story.strip():
        return []

    segmenter = segmenter or StorySegmenter()
    lead = title.strip()
    remainder = story
    if not lead:
        lead = first_sentence(story)
        if lead:
            trimmed = story.strip()
            position = trimmed.find(lead)
            if position != -1:
                remainder = trimmed[position + len(lead) :].strip()

    segments = segmenter.split(remainder) if remainder.strip() else []
    return ([lead] if lead else []) + segments


def _resolve_max_workers(max_workers: int | None) -> int:
    if max_workers is not None:
        return max(1, int(max_workers))

    raw = os.getenv("STORYSLIDES_MAX_WORKERS")
    if not raw:
        return 1
    try:
        return max(1, int(raw))
    except ValueError as exc:
        raise ConfigurationError(f"STORYSLIDES_MAX_WORKERS must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class _RenderJob:
    index: int
    text: str
    photo: bytes


class CarouselOrchestrator:
    """
    High-level coordinator that turns a story and a photo into slides.

    Every public render call takes a new generation number. Results are only
    published while that generation is still the newest, so a run that was
    overtaken by a later call is dropped instead of overwriting fresher slides.
    """

    def __init__(
        self,
        *,
        compositor: SlideCompositor | None = None,
        split_config: SplitConfig | None = None,
        style: StyleConfig | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._compositor = compositor or SlideCompositor()
        self._split_config = split_config or SplitConfig()
        self._style = style or DEFAULT_STYLE
        self._max_workers = _resolve_max_workers(max_workers)

        self._lock = threading.Lock()
        self._generation = 0
        self._full_generation = 0
        self._slide_generations: dict[int, int] = {}

        self._slides: tuple[SlideImage, ...] = ()
        self._slide_texts: tuple[str, ...] = ()
        self._photo: bytes | None = None
        self._title = ""
        self._story = ""
        self._overrides = PhotoOverrides()

    # ------------------------------------------------------------------ state

    @property
    def slides(self) -> tuple[SlideImage, ...]:
        with self._lock:
            return self._slides

    @property
    def slide_texts(self) -> tuple[str, ...]:
        with self._lock:
            return self._slide_texts

    @property
    def style(self) -> StyleConfig:
        return self._style

    @style.setter
    def style(self, value: StyleConfig) -> None:
        self._style = value

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def package(self) -> CarouselPackage:
        with self._lock:
            return CarouselPackage(
                title=self._title,
                story=self._story,
                slide_texts=list(self._slide_texts),
                style=self._style,
                split_config=self._split_config,
            )

    def plan_slides(self, story: str, title: str = "") -> list[str]:
        return plan_slides(story, title, StorySegmenter(self._split_config))

    # ------------------------------------------------------------------ rendering

    def generate(
        self,
        photo: PhotoSource,
        story: str,
        title: str = "",
        *,
        split_config: SplitConfig | None = None,
        style: StyleConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> list[SlideImage]:
        """
        Split the story and render every slide against ``photo``.

        Returns the slide list that is visible once the call completes.
        """
        split = split_config or self._split_config
        render_style = style or self._style

        photo_bytes = load_photo(photo)
        generation = self._begin(full=True)

        self._notify(progress_callback, "slides:planning", generation=generation)
        texts = plan_slides(story, title, StorySegmenter(split))
        with self._lock:
            overrides = PhotoOverrides(self._overrides.snapshot())
        overrides.prune(len(texts))
        self._notify(progress_callback, "slides:ready", total_slides=len(texts))

        jobs = [
            _RenderJob(index=index, text=text, photo=overrides.photo_for(index, photo_bytes))
            for index, text in enumerate(texts)
        ]
        try:
            slides = self._render(jobs, render_style, generation, len(texts), progress_callback)
        except StaleGenerationError as exc:
            logger.info("Discarding carousel generation %d: %s", generation, exc)
            return list(self.slides)

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding carousel generation %d; %d is newer.", generation, self._generation)
                return list(self._slides)
            self._slides = tuple(slides)
            self._slide_texts = tuple(texts)
            self._photo = photo_bytes
            self._split_config = split
            self._style = render_style
            self._title = title.strip()
            self._story = story
            self._overrides.prune(len(texts))
            published = list(self._slides)

        self._notify(progress_callback, "carousel:complete", total_slides=len(published))
        return published

    def regenerate_all(
        self,
        *,
        style: StyleConfig | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> list[SlideImage]:
        """Re-render every cached slide text without splitting the story again."""
        render_style = style or self._style

        generation = self._begin(full=True)
        with self._lock:
            texts = self._slide_texts
            default_photo = self._photo
            overrides = PhotoOverrides(self._overrides.snapshot())

        if default_photo is None or not texts:
            return list(self.slides)

        jobs = [
            _RenderJob(index=index, text=text, photo=overrides.photo_for(index, default_photo))
            for index, text in enumerate(texts)
        ]
        self._notify(progress_callback, "slides:ready", total_slides=len(texts))
        try:
            slides = self._render(jobs, render_style, generation, len(texts), progress_callback)
        except StaleGenerationError as exc:
            logger.info("Discarding carousel regeneration %d: %s", generation, exc)
            return list(self.slides)

        with self._lock:
            if generation != self._generation:
                return list(self._slides)
            self._slides = tuple(slides)
            self._style = render_style
            published = list(self._slides)

        self._notify(progress_callback, "carousel:complete", total_slides=len(published))
        return published

    def regenerate_one(self, index: int, photo_override: Any = _REGISTERED) -> SlideImage | None:
        """
        Re-render a single slide from its cached text.

        ``photo_override`` may be photo bytes or a path/URL, ``None`` for the
        default photo, or omitted to use the slide's registered override.
        Returns ``None`` when a newer call overtook this one.
        """
        with self._lock:
            texts = self._slide_texts
            default_photo = self._photo
            registered = self._overrides.photo_for(index, default_photo) if default_photo else None
            total = len(texts)

        if default_photo is None or not 0 <= index < total:
            raise IndexError(f"No slide {index} to regenerate; carousel has {total} slides.")

        if photo_override is _REGISTERED:
            photo = registered
        elif photo_override is None:
            photo = default_photo
        else:
            photo = load_photo(photo_override)

        generation = self._begin(index=index)
        job = _RenderJob(index=index, text=texts[index], photo=photo)
        slide = self._render_one(job, self._style, total)

        with self._lock:
            if generation <= self._full_generation or self._slide_generations.get(index) != generation:
                logger.info("Discarding regeneration %d of slide %d.", generation, index)
                return None
            if index >= len(self._slides):
                return None
            updated = list(self._slides)
            updated[index] = slide
            self._slides = tuple(updated)
        return slide

    # ------------------------------------------------------------------ photo overrides

    def set_slide_photo(self, index: int, photo: PhotoSource) -> SlideImage | None:
        photo_bytes = load_photo(photo)
        with self._lock:
            total = len(self._slide_texts)
            if self._photo is None or not 0 <= index < total:
                raise IndexError(f"No slide {index} to set a photo for; carousel has {total} slides.")
            self._overrides.set(index, photo_bytes)
        return self.regenerate_one(index, photo_bytes)

    def reset_slide_photo(self, index: int) -> SlideImage | None:
        with self._lock:
            self._overrides.reset(index)
        return self.regenerate_one(index, None)

    def apply_photo_to_all(self, source_index: int) -> list[SlideImage]:
        with self._lock:
            applied = self._overrides.apply_to_all(source_index, len(self._slide_texts))
        if not applied:
            return list(self.slides)
        return self.regenerate_all()

    def photo_overrides(self) -> dict[int, bytes]:
        with self._lock:
            return self._overrides.snapshot()

    # ------------------------------------------------------------------ internals

    def _begin(self, *, full: bool = False, index: int | None = None) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if full:
                self._full_generation = generation
                self._slide_generations.clear()
            elif index is not None:
                self._slide_generations[index] = generation
            return generation

    def _ensure_current(self, generation: int) -> None:
        with self._lock:
            latest = self._generation
        if generation != latest:
            raise StaleGenerationError(generation, latest)

    def _render(
        self,
        jobs: Sequence[_RenderJob],
        style: StyleConfig,
        generation: int,
        total: int,
        progress_callback: ProgressCallback | None,
    ) -> list[SlideImage]:
        if self._max_workers <= 1 or len(jobs) <= 1:
            slides: list[SlideImage] = []
            for job in jobs:
                # Cooperative cancellation: stop before starting stale work.
                self._ensure_current(generation)
                self._notify(progress_callback, "slide:rendering", slide_index=job.index, total_slides=total)
                slides.append(self._render_one(job, style, total))
                self._notify(progress_callback, "slide:done", slide_index=job.index, total_slides=total)
            return slides

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures: list[Future[SlideImage]] = [
                executor.submit(self._render_one, job, style, total) for job in jobs
            ]
            slides = []
            try:
                for job, future in zip(jobs, futures):
                    slides.append(future.result())
                    self._notify(progress_callback, "slide:done", slide_index=job.index, total_slides=total)
            except BaseException:
                for pending in futures:
                    pending.cancel()
                raise
        self._ensure_current(generation)
        return slides

    def _render_one(self, job: _RenderJob, style: StyleConfig, total: int) -> SlideImage:
        try:
            data = self._compositor.render(
                job.photo,
                job.text,
                style,
                slide_number=job.index + 1,
                slide_total=total,
            )
        except StorySlidesError as exc:
            logger.exception("Rendering slide %d failed.", job.index + 1)
            raise SlideGenerationError(
                f"Failed to render slide {job.index + 1}: {exc}", index=job.index
            ) from exc

        width, height = self._compositor.canvas_size
        return SlideImage(index=job.index, text=job.text, data=data, width=width, height=height)

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is not None:
            callback(stage, payload)
