"""End-to-end wiring: presentation bytes in, video results out."""

import asyncio

import structlog

from deck_video.config.settings import Settings, get_settings
from deck_video.generation.assembler import ProgressCallback, ResultAssembler, ResultsCallback
from deck_video.generation.bedrock_client import BedrockVideoClient, VideoGenerationClient
from deck_video.generation.models import GenerationConfig, VideoResult
from deck_video.generation.orchestrator import GenerationOrchestrator
from deck_video.ingestion.models import SelectionMap, SlideRecord
from deck_video.ingestion.ocr import BedrockTextRecognizer, OcrEnricher, TextRecognizer
from deck_video.ingestion.slide_extractor import extract_slides

logger = structlog.get_logger(__name__)


class DeckVideoPipeline:
    """Extraction, optional OCR and generation behind one object."""

    def __init__(
        self,
        video_client: VideoGenerationClient,
        recognizer: TextRecognizer | None = None,
        orchestrator: GenerationOrchestrator | None = None,
    ):
        """Initialize pipeline.

        Args:
            video_client: Generation service client.
            recognizer: OCR backend. OCR is unavailable when None.
            orchestrator: Preconfigured orchestrator. Built from video_client if None.
        """
        self.video_client = video_client
        self.recognizer = recognizer
        self.orchestrator = orchestrator or GenerationOrchestrator(video_client)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DeckVideoPipeline":
        """Build a pipeline backed by Amazon Bedrock."""
        settings = settings or get_settings()
        recognizer = BedrockTextRecognizer() if settings.ocr.enabled else None
        return cls(video_client=BedrockVideoClient(), recognizer=recognizer)

    async def extract(
        self,
        file_bytes: bytes,
        ocr: bool = False,
        progress: ProgressCallback | None = None,
    ) -> list[SlideRecord]:
        """Extract slides from presentation bytes.

        Args:
            file_bytes: Raw PPTX content.
            ocr: Append text recognized in slide images.
            progress: Optional progress callback.

        Returns:
            Slide records.
        """
        slides = await asyncio.to_thread(extract_slides, file_bytes, progress)

        if ocr:
            if self.recognizer is None:
                logger.warning("OCR requested but no recognizer configured")
            else:
                if progress is not None:
                    progress("Reading text from slide images...")
                slides = await OcrEnricher(self.recognizer).enrich(slides)

        return slides

    async def generate(
        self,
        slides: list[SlideRecord],
        selections: SelectionMap,
        config: GenerationConfig,
        on_update: ResultsCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[VideoResult]:
        """Generate videos for extracted slides.

        Args:
            slides: Slides to render.
            selections: Image selections per slide.
            config: Generation settings.
            on_update: Receives the growing result list after each clip.
            on_progress: Receives progress messages.

        Returns:
            Result list.
        """
        assembler = ResultAssembler(
            self.orchestrator,
            on_update=on_update,
            on_progress=on_progress,
        )
        return await assembler.generate(slides, selections, config)
