#!/usr/bin/env python3
"""Command-line interface for turning a deck into videos.

Examples:
    deck-video extract deck.pptx --ocr
    deck-video generate deck.pptx --style Documentary --output videos.zip
    deck-video generate deck.pptx --style Hollywood --genre Action --transition Fade
    deck-video generate deck.pptx --add-image 3:cover.jpg
    deck-video serve
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

from deck_video.config.settings import get_settings
from deck_video.delivery import VideoStore
from deck_video.errors import DeckVideoError
from deck_video.generation.models import (
    AspectRatio,
    FrameRate,
    GenerationConfig,
    Genre,
    Transition,
    VideoQuality,
    VideoResult,
    VideoStyle,
)
from deck_video.ingestion.models import (
    SelectionMap,
    SlideImage,
    SlideRecord,
    add_image,
    default_selections,
)
from deck_video.ingestion.slide_extractor import mime_type_for
from deck_video.logging_config import configure_logging
from deck_video.pipeline import DeckVideoPipeline

logger = structlog.get_logger(__name__)

MIN_DURATION_SECONDS = 5
MAX_DURATION_SECONDS = 60


def _values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def parse_selection(value: str) -> tuple[int, int]:
    """Parse a ``SLIDE:INDEX`` selection override."""
    try:
        slide, index = value.split(":", 1)
        return int(slide), int(index)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected SLIDE:INDEX, got '{value}'")


def parse_image_addition(value: str) -> tuple[int, Path]:
    """Parse a ``SLIDE:PATH`` image addition."""
    slide, _, path = value.partition(":")
    try:
        slide_number = int(slide)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected SLIDE:PATH, got '{value}'")
    if not path:
        raise argparse.ArgumentTypeError(f"Expected SLIDE:PATH, got '{value}'")
    return slide_number, Path(path)


def parse_duration(value: str) -> int:
    """Parse a target duration within the supported range."""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected a whole number of seconds, got '{value}'")
    if not MIN_DURATION_SECONDS <= seconds <= MAX_DURATION_SECONDS:
        raise argparse.ArgumentTypeError(
            f"Duration must be between {MIN_DURATION_SECONDS} and {MAX_DURATION_SECONDS} seconds"
        )
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deck-video",
        description="Turn PowerPoint decks into generated video clips",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Show the slides extracted from a deck")
    extract.add_argument("pptx", type=Path, help="Path to the PPTX file")
    extract.add_argument("--ocr", action="store_true", help="Append text read from slide images")

    generate = subparsers.add_parser("generate", help="Generate videos for a deck")
    generate.add_argument("pptx", type=Path, help="Path to the PPTX file")
    generate.add_argument("--ocr", action="store_true", help="Append text read from slide images")
    generate.add_argument("--style", choices=_values(VideoStyle), default=VideoStyle.DEFAULT.value)
    generate.add_argument("--quality", choices=_values(VideoQuality), default=VideoQuality.HD.value)
    generate.add_argument("--aspect-ratio", choices=_values(AspectRatio), default=AspectRatio.WIDE.value)
    generate.add_argument("--frame-rate", choices=_values(FrameRate), default=FrameRate.FPS_30.value)
    generate.add_argument("--genre", choices=_values(Genre), default=Genre.NONE.value)
    generate.add_argument("--keywords", default="", help="Extra style keywords (Hollywood style)")
    generate.add_argument(
        "--transition",
        choices=_values(Transition),
        default=Transition.NONE.value,
        help="None generates one clip per slide; anything else one combined video",
    )
    generate.add_argument("--no-voiceover", action="store_true", help="Do not narrate slide text")
    generate.add_argument("--intro", action="store_true", help="Add a trailer intro (Hollywood style)")
    generate.add_argument(
        "--duration",
        type=parse_duration,
        default=15,
        help="Target duration in seconds (5-60)",
    )
    generate.add_argument(
        "--select",
        type=parse_selection,
        action="append",
        default=[],
        metavar="SLIDE:INDEX",
        help="Use image INDEX (0-based) of SLIDE as its seed image",
    )
    generate.add_argument(
        "--add-image",
        type=parse_image_addition,
        action="append",
        default=[],
        metavar="SLIDE:PATH",
        help="Add the image file at PATH to SLIDE and use it as the seed image",
    )
    generate.add_argument("--output", "-o", type=Path, help="Write all videos to this zip file")

    subparsers.add_parser("serve", help="Start the API server")

    return parser


def config_from_args(args: argparse.Namespace) -> GenerationConfig:
    return GenerationConfig(
        style=VideoStyle(args.style),
        quality=VideoQuality(args.quality),
        aspect_ratio=AspectRatio(args.aspect_ratio),
        frame_rate=FrameRate(args.frame_rate),
        genre=Genre(args.genre),
        keywords=args.keywords,
        transition=Transition(args.transition),
        voiceover=not args.no_voiceover,
        intro=args.intro,
        duration_seconds=args.duration,
    )


def slides_summary(slides: list[SlideRecord]) -> list[dict]:
    return [
        {
            "slide_number": slide.slide_number,
            "text": slide.text,
            "images": [image.mime_type for image in slide.images],
            "has_thumbnail": slide.thumbnail is not None,
        }
        for slide in slides
    ]


def results_summary(results: list[VideoResult]) -> list[dict]:
    return [
        {
            "slide_number": result.slide_number,
            "media_uri": result.media_uri,
            "narration_text": result.narration_text,
        }
        for result in results
    ]


def _progress(message: str) -> None:
    print(message, file=sys.stderr)


async def run_extract(pipeline: DeckVideoPipeline, args: argparse.Namespace) -> int:
    slides = await pipeline.extract(args.pptx.read_bytes(), ocr=args.ocr, progress=_progress)
    print(json.dumps(slides_summary(slides), indent=2))
    return 0


async def run_generate(pipeline: DeckVideoPipeline, args: argparse.Namespace) -> int:
    config = config_from_args(args)
    slides = await pipeline.extract(args.pptx.read_bytes(), ocr=args.ocr, progress=_progress)

    selections: SelectionMap = default_selections(slides)
    for slide_number, path in args.add_image:
        if not any(slide.slide_number == slide_number for slide in slides):
            logger.warning("No such slide for added image", slide_number=slide_number, path=str(path))
            continue
        image = SlideImage.from_bytes(path.read_bytes(), mime_type_for(path.name))
        slides, selections = add_image(slides, selections, slide_number, image)
    selections.update(dict(args.select))

    completed: list[VideoResult] = []

    def on_update(results: list[VideoResult]) -> None:
        completed[:] = results
        _progress(f"{len(results)} video(s) ready")

    try:
        results = await pipeline.generate(
            slides,
            selections,
            config,
            on_update=on_update,
            on_progress=_progress,
        )
    except DeckVideoError:
        if completed:
            print(json.dumps(results_summary(completed), indent=2))
        raise

    print(json.dumps(results_summary(results), indent=2))

    if args.output:
        archive = VideoStore().bundle(results, progress=_progress)
        args.output.write_bytes(archive)
        _progress(f"Videos saved to: {args.output}")

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging_settings = settings.logging
    if args.verbose:
        logging_settings = logging_settings.model_copy(update={"level": "DEBUG"})
    configure_logging(logging_settings)

    if args.command == "serve":
        from deck_video.api.main import run

        run()
        return 0

    if not args.pptx.exists():
        print(f"Error: file not found: {args.pptx}", file=sys.stderr)
        return 1

    for _, path in getattr(args, "add_image", []):
        if not path.is_file():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1

    pipeline = DeckVideoPipeline.from_settings(settings)

    try:
        if args.command == "extract":
            return asyncio.run(run_extract(pipeline, args))
        return asyncio.run(run_generate(pipeline, args))
    except DeckVideoError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
