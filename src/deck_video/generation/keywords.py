"""Genre keyword suggestions for the Hollywood style."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from deck_video.config import get_bedrock_runtime_client
from deck_video.config.settings import get_settings
from deck_video.errors import KeywordSuggestionFailed
from deck_video.generation.models import Genre

logger = structlog.get_logger(__name__)

KEYWORD_PROMPT = (
    'Generate 5-7 creative and descriptive keywords for a video with a "{genre}" genre. '
    'Return only a comma-separated list. For example: "keyword one, keyword two, keyword three"'
)


class KeywordSuggester:
    """Ask a Bedrock text model for keywords matching a genre."""

    def __init__(self, model_id: str | None = None, client: Any | None = None):
        settings = get_settings()
        self.model_id = model_id or settings.bedrock.text_model_id
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load Bedrock runtime client."""
        if self._client is None:
            self._client = get_bedrock_runtime_client()
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def suggest_sync(self, genre: Genre) -> str:
        body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": 200,
            "messages": [
                {"role": "user", "content": KEYWORD_PROMPT.format(genre=genre.value)},
            ],
        }
        response = self.client.invoke_model(
            modelId=self.model_id,
            body=json.dumps(body),
            contentType="application/json",
            accept="application/json",
        )
        response_body = json.loads(response["body"].read())
        text = "".join(
            block.get("text", "")
            for block in response_body.get("content", [])
            if block.get("type") == "text"
        )
        return text.strip().strip('"')

    async def suggest(self, genre: Genre) -> str:
        """Suggest keywords for a genre.

        Args:
            genre: Target genre. Genre.NONE yields an empty string.

        Returns:
            Comma-separated keywords.

        Raises:
            KeywordSuggestionFailed: If the model call fails.
        """
        if genre == Genre.NONE:
            return ""

        try:
            keywords = await asyncio.to_thread(self.suggest_sync, genre)
        except Exception as e:
            logger.error("Keyword generation failed", genre=genre.value, error=str(e))
            raise KeywordSuggestionFailed(str(e)) from e

        logger.info("Generated keywords", genre=genre.value, keywords=keywords)
        return keywords
