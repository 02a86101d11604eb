"""Sequential assembly of generated videos into a result list."""

from collections.abc import Callable

import structlog

from deck_video.generation.models import GenerationConfig, VideoResult
from deck_video.generation.orchestrator import GenerationOrchestrator
from deck_video.generation.prompts import PromptComposer
from deck_video.ingestion.models import SelectionMap, SlideRecord, selected_image

logger = structlog.get_logger(__name__)

ResultsCallback = Callable[[list[VideoResult]], None]
ProgressCallback = Callable[[str], None]


class ResultAssembler:
    """Generate videos for a deck and collect them in order.

    Individual clips are generated one slide at a time; after every finished
    clip a copy of the result list is published through ``on_update``. If a
    slide fails, the remaining slides are not attempted and the results
    gathered so far stay available on ``results``.
    """

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        composer: PromptComposer | None = None,
        on_update: ResultsCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.orchestrator = orchestrator
        self.composer = composer or PromptComposer()
        self.on_update = on_update
        self.on_progress = on_progress
        self.results: list[VideoResult] = []

    async def generate(
        self,
        slides: list[SlideRecord],
        selections: SelectionMap,
        config: GenerationConfig,
    ) -> list[VideoResult]:
        """Generate individual clips or one combined video based on the transition."""
        if config.combined:
            return await self.generate_combined(slides, selections, config)
        return await self.generate_individual(slides, selections, config)

    async def generate_individual(
        self,
        slides: list[SlideRecord],
        selections: SelectionMap,
        config: GenerationConfig,
    ) -> list[VideoResult]:
        """Generate one clip per slide, strictly in order.

        Args:
            slides: Slides to render.
            selections: Image selections per slide.
            config: Generation settings.

        Returns:
            One result per slide in slide order.
        """
        self.results = []
        total = len(slides)

        for slide in slides:
            self._report(f"Generating video for slide {slide.slide_number} of {total}...")

            image = selected_image(slide, selections)
            prompt = self.composer.compose_single(slide, image, config)
            request = self.orchestrator.build_request(prompt, image)

            try:
                video = await self.orchestrator.submit_and_await(request)
            except Exception:
                logger.error(
                    "Batch aborted",
                    slide_number=slide.slide_number,
                    completed=len(self.results),
                    total=total,
                )
                raise

            self.results.append(
                VideoResult(
                    slide_number=slide.slide_number,
                    media_uri=video.uri,
                    thumbnail_uri=video.thumbnail_uri,
                    narration_text=slide.text,
                    reference_image=image,
                )
            )
            self._publish()

        return list(self.results)

    async def generate_combined(
        self,
        slides: list[SlideRecord],
        selections: SelectionMap,
        config: GenerationConfig,
    ) -> list[VideoResult]:
        """Generate a single video covering every slide.

        Args:
            slides: Slides to render.
            selections: Image selections per slide.
            config: Generation settings; the transition must not be None.

        Returns:
            Single-element result list.
        """
        self.results = []
        transition = config.transition.value
        self._report(f"Generating single video with '{transition}' transitions...")

        seed_image = self.composer.combined_seed_image(slides, selections)
        if seed_image is not None:
            logger.info("Using a presentation image as the visual seed for the whole video")

        prompt = self.composer.compose_combined(slides, selections, config)
        video = await self.orchestrator.submit_and_await(
            self.orchestrator.build_request(prompt, seed_image)
        )

        self.results.append(
            VideoResult(
                slide_number=1,
                media_uri=video.uri,
                thumbnail_uri=video.thumbnail_uri,
                narration_text=f"Combined video of {len(slides)} slides with '{transition}' transitions.",
                reference_image=seed_image,
            )
        )
        self._publish()
        return list(self.results)

    def _publish(self) -> None:
        if self.on_update is not None:
            self.on_update(list(self.results))

    def _report(self, message: str) -> None:
        logger.info(message)
        if self.on_progress is not None:
            self.on_progress(message)
