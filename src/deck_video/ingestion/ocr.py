"""Best-effort OCR enrichment of slide text.

Recognition runs per image through a TextRecognizer. A failed recognition
counts as "no text" for that image; enrichment itself never fails.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from deck_video.config import get_bedrock_runtime_client
from deck_video.config.settings import get_settings
from deck_video.ingestion.models import SlideImage, SlideRecord

logger = structlog.get_logger(__name__)

OCR_INSTRUCTION = "Extract all text from this image. If no text is present, return an empty string."


class TextRecognizer(Protocol):
    """Anything that can read the text out of an image."""

    async def recognize(self, image: SlideImage) -> str: ...


@dataclass
class RecognitionOutcome:
    """Result of one recognition attempt."""

    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BedrockTextRecognizer:
    """Read image text with a multimodal Claude model on Amazon Bedrock."""

    ANTHROPIC_VERSION = "bedrock-2023-05-31"

    def __init__(
        self,
        model_id: str | None = None,
        max_tokens: int | None = None,
        client: Any | None = None,
    ):
        """Initialize recognizer.

        Args:
            model_id: Bedrock model ID. Uses the configured vision model if not set.
            max_tokens: Max tokens in the response.
            client: Bedrock runtime client. Lazily created if not provided.
        """
        settings = get_settings()
        self.model_id = model_id or settings.bedrock.vision_model_id
        self.max_tokens = max_tokens or settings.ocr.max_tokens
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load Bedrock runtime client."""
        if self._client is None:
            self._client = get_bedrock_runtime_client()
        return self._client

    def build_body(self, image: SlideImage) -> dict[str, Any]:
        """Build the Messages API request body for one image."""
        return {
            "anthropic_version": self.ANTHROPIC_VERSION,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": OCR_INSTRUCTION},
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": image.mime_type,
                                "data": image.data,
                            },
                        },
                    ],
                }
            ],
        }

    def recognize_sync(self, image: SlideImage) -> str:
        response = self.client.invoke_model(
            modelId=self.model_id,
            body=json.dumps(self.build_body(image)),
            contentType="application/json",
            accept="application/json",
        )
        response_body = json.loads(response["body"].read())
        parts = [
            block.get("text", "")
            for block in response_body.get("content", [])
            if block.get("type") == "text"
        ]
        return "".join(parts).strip()

    async def recognize(self, image: SlideImage) -> str:
        return await asyncio.to_thread(self.recognize_sync, image)


class OcrEnricher:
    """Append text recognized in slide images to the slide text."""

    def __init__(self, recognizer: TextRecognizer, max_concurrent: int | None = None):
        """Initialize enricher.

        Args:
            recognizer: Recognition backend.
            max_concurrent: Maximum in-flight recognition requests.
        """
        self.recognizer = recognizer
        self.max_concurrent = max_concurrent or get_settings().ocr.max_concurrent
        self._semaphore: asyncio.Semaphore | None = None

    async def recognize_or_empty(self, image: SlideImage) -> RecognitionOutcome:
        """Recognize one image, turning any failure into an empty outcome."""
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrent)

        async with self._semaphore:
            try:
                text = await self.recognizer.recognize(image)
            except Exception as e:
                logger.warning("Image text recognition failed", error=str(e))
                return RecognitionOutcome(text="", error=str(e))

        return RecognitionOutcome(text=(text or "").strip())

    async def enrich_slide(self, slide: SlideRecord) -> SlideRecord:
        """Enrich a single slide. Slides without images are returned as-is."""
        if not slide.images:
            return slide

        outcomes = await asyncio.gather(
            *(self.recognize_or_empty(image) for image in slide.images)
        )
        recognized = " ".join(o.text for o in outcomes if o.text)

        failures = sum(1 for o in outcomes if not o.ok)
        logger.debug(
            "Slide OCR complete",
            slide_number=slide.slide_number,
            images=len(slide.images),
            failures=failures,
            recognized_chars=len(recognized),
        )

        return slide.with_text_appended(recognized)

    async def enrich(self, slides: list[SlideRecord]) -> list[SlideRecord]:
        """Enrich all slides, preserving order.

        Args:
            slides: Extracted slide records.

        Returns:
            New list of slide records with recognized text appended.
        """
        enriched = await asyncio.gather(*(self.enrich_slide(slide) for slide in slides))

        logger.info(
            "OCR enrichment complete",
            slides=len(slides),
            enriched=sum(1 for before, after in zip(slides, enriched) if before is not after),
        )
        return list(enriched)
