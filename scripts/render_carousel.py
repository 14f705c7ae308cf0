"""
CLI to turn a story and a background photo into a folder of carousel slides.

Usage:
    python scripts/render_carousel.py \
        --story story.txt \
        --photo beach.jpg \
        --title "A Day at the Sea" \
        --output slides/ \
        --zip --pdf
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storyslides import CarouselOrchestrator, SplitConfig, StyleConfig  # noqa: E402
from storyslides.common import StorySlidesError, load_mapping_file  # noqa: E402
from storyslides.compositing import SlideCompositor  # noqa: E402
from storyslides.export import PAGE_SIZES, SlideBookPDFBuilder, write_slides, write_zip  # noqa: E402
from storyslides.layout import FontRegistry, FontStyle, TextPosition  # noqa: E402


class ProgressTracker:
    """
    Command-line progress updates for a carousel render.
    """

    def __init__(self) -> None:
        self._slide_bar: tqdm | None = None

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        match stage:
            case "slides:planning":
                self._write("[1/3] Splitting the story into slides...")
            case "slides:ready":
                total = payload.get("total_slides", 0)
                self._write(f"[2/3] Story divided into {total} slides. Rendering...")
                self._slide_bar = tqdm(total=total, desc="Slides", unit="slide")
            case "slide:rendering":
                if self._slide_bar is not None:
                    index = payload.get("slide_index")
                    if index is not None:
                        self._slide_bar.set_description(f"Slide {index + 1}")
            case "slide:done":
                if self._slide_bar is not None:
                    self._slide_bar.update(1)
            case "carousel:complete":
                self._write("[3/3] Carousel complete.")
                self.close()

    def close(self) -> None:
        if self._slide_bar is not None:
            self._slide_bar.close()
            self._slide_bar = None

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a story onto a photo as carousel slides.")
    parser.add_argument("--story", required=True, help="Path to a UTF-8 text file with the story.")
    parser.add_argument("--photo", required=True, help="Background photo path or URL.")
    parser.add_argument("--title", default="", help="Optional title shown on the first slide.")
    parser.add_argument("--output", default="slides", help="Directory for the rendered slides.")
    parser.add_argument(
        "--config",
        default=None,
        help="YAML/JSON file with optional 'style' and 'split' sections.",
    )
    parser.add_argument("--font-style", choices=[item.value for item in FontStyle], default=None)
    parser.add_argument("--text-color", default=None, help="Text colour, e.g. '#FFFFFF' or 'rgb(0,0,0)'.")
    parser.add_argument("--position", choices=[item.value for item in TextPosition], default=None)
    parser.add_argument("--font-size", type=int, default=None)
    parser.add_argument("--outline-width", type=int, default=None, help="Outline width in pixels (5-30).")
    parser.add_argument("--overlay", type=float, default=None, metavar="OPACITY",
                        help="Paint a black overlay with the given opacity (0-1).")
    parser.add_argument("--slide-numbers", action="store_true", help="Draw n/total on every slide.")
    parser.add_argument("--max-chars", type=int, default=None, help="Characters per slide (default: 125).")
    parser.add_argument("--min-slides", type=int, default=None)
    parser.add_argument("--max-slides", type=int, default=None)
    parser.add_argument("--slide-photo", action="append", default=[], metavar="INDEX=PHOTO",
                        help="Use a different photo for one zero-based slide index (repeatable).")
    parser.add_argument("--font-dir", action="append", default=[], help="Extra font directory to search.")
    parser.add_argument("--workers", type=int, default=None, help="Render slides on this many threads.")
    parser.add_argument("--zip", action="store_true", help="Also write carousel.zip.")
    parser.add_argument("--pdf", action="store_true", help="Also write carousel.pdf.")
    parser.add_argument("--pdf-page-size", choices=sorted(PAGE_SIZES.keys()), default="slide")
    parser.add_argument("--manifest", action="store_true", help="Also write carousel.yaml.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    return parser.parse_args(argv)


def build_style(args: argparse.Namespace, settings: Dict[str, Any]) -> StyleConfig:
    values: Dict[str, Any] = dict(settings.get("style") or {})
    overrides = {
        "font_style": args.font_style,
        "text_color": args.text_color,
        "text_position": args.position,
        "font_size": args.font_size,
        "outline_width": args.outline_width,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    if args.overlay is not None:
        values["background_overlay"] = True
        values["overlay_opacity"] = args.overlay
    if args.slide_numbers:
        values["show_slide_numbers"] = True
    return StyleConfig.from_mapping(values)


def build_split_config(args: argparse.Namespace, settings: Dict[str, Any]) -> SplitConfig:
    values: Dict[str, Any] = dict(settings.get("split") or {})
    overrides = {
        "max_chars_per_slide": args.max_chars,
        "min_slides": args.min_slides,
        "max_slides": args.max_slides,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return SplitConfig.from_mapping(values)


def parse_slide_photos(pairs: list[str]) -> Dict[int, str]:
    photos: Dict[int, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid --slide-photo '{pair}', expected INDEX=PHOTO.")
        index, photo = pair.split("=", 1)
        try:
            photos[int(index)] = photo.strip()
        except ValueError as exc:
            raise ValueError(f"Slide index must be an integer in '{pair}'.") from exc
    return photos


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings: Dict[str, Any] = dict(load_mapping_file(args.config)) if args.config else {}
    style = build_style(args, settings)
    split_config = build_split_config(args, settings)
    slide_photos = parse_slide_photos(args.slide_photo)

    registry = FontRegistry(extra_roots=args.font_dir)
    orchestrator = CarouselOrchestrator(
        compositor=SlideCompositor(font_registry=registry),
        split_config=split_config,
        style=style,
        max_workers=args.workers,
    )

    story = Path(args.story).read_text(encoding="utf-8")
    tracker = ProgressTracker()
    try:
        orchestrator.generate(args.photo, story, args.title, progress_callback=tracker)
        for index, photo in sorted(slide_photos.items()):
            orchestrator.set_slide_photo(index, photo)
        slides = list(orchestrator.slides)
    except (StorySlidesError, IndexError) as exc:
        tqdm.write(f"Failed to render carousel: {exc}")
        return 1
    finally:
        tracker.close()

    if not slides:
        tqdm.write("The story is empty; nothing to render.")
        return 1

    output_dir = Path(args.output)
    written = write_slides(slides, output_dir, args.title)
    tqdm.write(f"Saved {len(written)} slides to {output_dir}")

    if args.zip:
        archive = write_zip(slides, output_dir / "carousel.zip", args.title)
        tqdm.write(f"Saved slide archive to {archive}")
    if args.pdf:
        builder = SlideBookPDFBuilder(page_size=PAGE_SIZES[args.pdf_page_size])
        pdf_path = builder.build(slides, output_dir / "carousel.pdf", title=args.title)
        tqdm.write(f"Saved slide book to {pdf_path}")
    if args.manifest:
        manifest_path = output_dir / "carousel.yaml"
        manifest_path.write_text(orchestrator.package().to_yaml(), encoding="utf-8")
        tqdm.write(f"Saved carousel manifest to {manifest_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
