"""Prompt composition for slide videos.

The video model takes a prompt and an optional seed image only. Settings it
cannot parameterize (quality tier, frame rate, aspect ratio, duration) are
stated in the prompt text instead of being dropped.

Prompts are composed within the model's character limit. When a prompt would
run over, the slide text is shortened first (proportionally across scenes in a
combined prompt). If that leaves too little room for the text, the instruction
clauses switch to a compact wording. Setting clauses and scene lines are kept
either way.
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from deck_video.config.settings import get_settings
from deck_video.generation.models import GenerationConfig, Genre
from deck_video.ingestion.models import SelectionMap, SlideImage, SlideRecord, selected_image

logger = structlog.get_logger(__name__)

INTRO_INSTRUCTION = (
    "Start with a dramatic 5-10 second movie trailer intro. It should be a fast-paced "
    "montage with epic music, teasing the main themes. After the intro, the main video begins. "
)
SEED_IMAGE_INSTRUCTION = " Use the provided image as the visual reference for the opening frame."
VOICEOVER_INSTRUCTION = " Include a clear voiceover narrating the text."
STORY_INSTRUCTION = "\nThe video should tell a cohesive story across all scenes.\n"
VOICEOVER_SCRIPT_HEADER = (
    "Include a single, continuous voiceover narrating the story. "
    "Here is the script for each scene:\n"
)
SCENES_HEADER = "Here are the scenes:\n"

# Text kept per slide before falling back to the compact wording
MIN_NARRATION_CHARS = 80
MIN_SCENE_CHARS = 12
# Keywords are cut to make room for slide text, down to this length
MIN_KEYWORD_CHARS = 40

ELLIPSIS = "..."


@dataclass(frozen=True)
class Wording:
    """Instruction clauses used to build a prompt."""

    intro: str
    seed_image: str
    voiceover: str
    duration: str
    timing: str
    script_header: str
    scenes_header: str


FULL_WORDING = Wording(
    intro=INTRO_INSTRUCTION,
    seed_image=SEED_IMAGE_INSTRUCTION,
    voiceover=VOICEOVER_INSTRUCTION,
    duration="The video should be approximately {seconds} seconds long.",
    timing="Total duration should be approximately {seconds} seconds. Transition between scenes: {transition}.",
    script_header=STORY_INSTRUCTION + VOICEOVER_SCRIPT_HEADER,
    scenes_header=STORY_INSTRUCTION + SCENES_HEADER,
)

COMPACT_WORDING = Wording(
    intro="Open with a 5-10 second trailer montage. ",
    seed_image=" Image is the opening frame.",
    voiceover=" Narrate the text as a voiceover.",
    duration="About {seconds} seconds long.",
    timing="About {seconds} seconds total. Transitions: {transition}.",
    script_header="\nOne cohesive story, one continuous voiceover. Script:\n",
    scenes_header="\nOne cohesive story. Scenes:\n",
)


def shorten(text: str, limit: int) -> str:
    """Cut text to at most ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[: max(limit, 0)]
    return text[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


def fit_texts(texts: list[str], room: int) -> list[str]:
    """Shorten texts in proportion to their length so they fit in ``room`` characters."""
    total = sum(len(t) for t in texts)
    if total <= room:
        return list(texts)
    room = max(room, 0)
    return [shorten(t, len(t) * room // total) for t in texts]


class PromptComposer:
    """Build natural-language generation prompts from slides."""

    def __init__(self, max_chars: int | None = None):
        """Initialize the composer.

        Args:
            max_chars: Longest prompt the video model accepts. Defaults to
                ``GENERATION_MAX_PROMPT_CHARS``.
        """
        self.max_chars = max_chars or get_settings().generation.max_prompt_chars

    def compose_single(
        self,
        slide: SlideRecord,
        image: SlideImage | None,
        config: GenerationConfig,
    ) -> str:
        """Compose the prompt for one slide's clip.

        Args:
            slide: Slide to render.
            image: Selected seed image for the slide, if any.
            config: Generation settings.

        Returns:
            Prompt text.
        """
        text = slide.text.strip()
        narrate = config.voiceover and bool(text)

        def build(wording: Wording, texts: list[str], keywords: str) -> str:
            return self._single(wording, texts[0], keywords, image is not None, narrate, config)

        prompt = self._fit(build, [text], config.keywords.strip(), MIN_NARRATION_CHARS)
        self._log_quality(config)
        return prompt

    def compose_combined(
        self,
        slides: list[SlideRecord],
        selections: SelectionMap,
        config: GenerationConfig,
    ) -> str:
        """Compose the prompt for one video spanning all slides.

        Args:
            slides: Slides in deck order.
            selections: Image selections, used to decide on a seed image.
            config: Generation settings.

        Returns:
            Prompt text.
        """
        scenes = [
            slide.text.strip()
            for slide in sorted(slides, key=lambda s: s.slide_number)
            if slide.text.strip()
        ]
        has_seed = self.combined_seed_image(slides, selections) is not None

        def build(wording: Wording, texts: list[str], keywords: str) -> str:
            return self._combined(wording, texts, keywords, has_seed, config)

        prompt = self._fit(build, scenes, config.keywords.strip(), MIN_SCENE_CHARS)
        self._log_quality(config)
        return prompt

    @staticmethod
    def combined_seed_image(slides: list[SlideRecord], selections: SelectionMap) -> SlideImage | None:
        """Pick the seed image for a combined video.

        The first slide, by slide number, with a valid selection wins.
        """
        for slide in sorted(slides, key=lambda s: s.slide_number):
            image = selected_image(slide, selections)
            if image is not None:
                return image
        return None

    def _fit(
        self,
        build: Callable[[Wording, list[str], str], str],
        texts: list[str],
        keywords: str,
        min_chars: int,
    ) -> str:
        """Build a prompt within ``max_chars``.

        Wording is compacted when the full wording leaves less than
        ``min_chars`` per text. Keywords give up characters only when the
        texts still lack that minimum. Whatever room remains is shared by
        the texts in proportion to their length.
        """
        prompt = build(FULL_WORDING, texts, keywords)
        if len(prompt) <= self.max_chars:
            return prompt

        blank = [""] * len(texts)
        wanted = sum(min(len(t), min_chars) for t in texts)
        wording = FULL_WORDING
        if self.max_chars - len(build(FULL_WORDING, blank, keywords)) < wanted:
            wording = COMPACT_WORDING

        room = self.max_chars - len(build(wording, blank, keywords))
        if room < wanted and keywords:
            keep = max(len(keywords) - (wanted - room), min(len(keywords), MIN_KEYWORD_CHARS))
            keywords = shorten(keywords, max(min(keep, len(keywords) + room), 0))
            room = self.max_chars - len(build(wording, blank, keywords))

        fitted = build(wording, fit_texts(texts, room), keywords)
        logger.info(
            "Prompt shortened to fit model limit",
            original_chars=len(prompt),
            prompt_chars=len(fitted),
            max_chars=self.max_chars,
            compact=wording is COMPACT_WORDING,
        )
        return fitted

    def _single(
        self,
        wording: Wording,
        text: str,
        keywords: str,
        has_image: bool,
        narrate: bool,
        config: GenerationConfig,
    ) -> str:
        duration = wording.duration.format(seconds=config.duration_seconds)

        if config.is_hollywood:
            prompt = (
                f"{self._intro(wording, config)}Cinematic video about: \"{text}\". Style: Hollywood. "
                f"{self._format_clause(config)} {duration}"
            )
            prompt += self._hollywood_extras(config, keywords)
        else:
            prompt = (
                f"Video about: \"{text}\". Style: {config.style.value}. "
                f"{self._format_clause(config)} {duration}"
            )

        if has_image:
            prompt += wording.seed_image

        if narrate:
            prompt += wording.voiceover

        return prompt

    def _combined(
        self,
        wording: Wording,
        scenes: list[str],
        keywords: str,
        has_seed: bool,
        config: GenerationConfig,
    ) -> str:
        timing = wording.timing.format(
            seconds=config.duration_seconds,
            transition=config.transition.value.lower(),
        )

        prompt = (
            f"{self._intro(wording, config)}A single continuous video. Style: {config.style.value}. "
            f"{self._format_clause(config)} {timing}"
        )
        if config.is_hollywood:
            prompt += self._hollywood_extras(config, keywords)

        if has_seed:
            prompt += wording.seed_image

        prompt += wording.script_header if config.voiceover else wording.scenes_header

        for number, text in enumerate(scenes, start=1):
            prompt += f"- Scene {number}: \"{text}\"\n"

        return prompt

    @staticmethod
    def _intro(wording: Wording, config: GenerationConfig) -> str:
        return wording.intro if config.intro and config.is_hollywood else ""

    @staticmethod
    def _format_clause(config: GenerationConfig) -> str:
        return (
            f"Aspect ratio: {config.aspect_ratio.value}. "
            f"Frame rate: {config.frame_rate.value}. "
            f"Target quality: {config.quality.value}."
        )

    @staticmethod
    def _hollywood_extras(config: GenerationConfig, keywords: str) -> str:
        extras = ""
        if config.genre != Genre.NONE:
            extras += f" Genre: {config.genre.value}."
        if keywords:
            extras += f" Keywords: {keywords}."
        return extras

    @staticmethod
    def _log_quality(config: GenerationConfig) -> None:
        logger.info(
            "Quality and frame rate are requested in the prompt only",
            quality=config.quality.value,
            frame_rate=config.frame_rate.value,
        )
