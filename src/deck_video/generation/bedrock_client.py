"""Amazon Nova Reel video generation via Bedrock async invocations.

Jobs are started with ``start_async_invoke`` and tracked with
``get_async_invoke``. Nova Reel writes ``output.mp4`` under the S3 location
reported for the invocation.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Protocol

import structlog

from deck_video.config import get_bedrock_runtime_client
from deck_video.config.settings import get_settings
from deck_video.generation.models import GeneratedVideo, GenerationOperation, GenerationRequest

logger = structlog.get_logger(__name__)

STATUS_IN_PROGRESS = "InProgress"
STATUS_COMPLETED = "Completed"
STATUS_FAILED = "Failed"

OUTPUT_FILENAME = "output.mp4"


class VideoGenerationClient(Protocol):
    """Submit generation jobs and poll their state."""

    async def submit(self, request: GenerationRequest) -> GenerationOperation: ...

    async def poll(self, operation: GenerationOperation) -> GenerationOperation: ...


class BedrockVideoClient:
    """Nova Reel client implementing VideoGenerationClient."""

    def __init__(
        self,
        output_s3_uri: str | None = None,
        duration_seconds: int | None = None,
        fps: int | None = None,
        dimension: str | None = None,
        max_prompt_chars: int | None = None,
        client: Any | None = None,
    ):
        """Initialize Nova Reel client.

        Args:
            output_s3_uri: S3 location receiving generated videos.
            duration_seconds: Clip length requested from the model.
            fps: Frame rate requested from the model.
            dimension: Output resolution, e.g. "1280x720".
            max_prompt_chars: Longest prompt the model accepts.
            client: Bedrock runtime client. Lazily created if not provided.
        """
        settings = get_settings()

        if output_s3_uri is None:
            prefix = settings.s3.output_prefix.strip("/")
            output_s3_uri = f"s3://{settings.s3.bucket_name}/{prefix}" if prefix else f"s3://{settings.s3.bucket_name}"

        self.output_s3_uri = output_s3_uri
        self.duration_seconds = duration_seconds or settings.generation.clip_duration_seconds
        self.fps = fps or settings.generation.fps
        self.dimension = dimension or settings.generation.dimension
        self.max_prompt_chars = max_prompt_chars or settings.generation.max_prompt_chars
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load Bedrock runtime client."""
        if self._client is None:
            self._client = get_bedrock_runtime_client()
        return self._client

    def build_model_input(self, request: GenerationRequest) -> dict[str, Any]:
        """Build the Nova Reel TEXT_VIDEO payload.

        Prompts arrive already fitted to the limit by ``PromptComposer``. The
        cut here only guards requests built some other way.
        """
        prompt = request.prompt
        if len(prompt) > self.max_prompt_chars:
            logger.warning(
                "Prompt truncated to model limit",
                prompt_chars=len(prompt),
                max_chars=self.max_prompt_chars,
            )
            prompt = prompt[: self.max_prompt_chars]

        text_params: dict[str, Any] = {"text": prompt}
        if request.seed_image is not None:
            text_params["images"] = [
                {
                    "format": request.seed_image.format,
                    "source": {"bytes": request.seed_image.data},
                }
            ]

        return {
            "taskType": "TEXT_VIDEO",
            "textToVideoParams": text_params,
            "videoGenerationConfig": {
                "durationSeconds": self.duration_seconds,
                "fps": self.fps,
                "dimension": self.dimension,
                "seed": random.randint(0, 2_147_483_646),
            },
        }

    def submit_sync(self, request: GenerationRequest) -> GenerationOperation:
        response = self.client.start_async_invoke(
            modelId=request.model_id,
            modelInput=self.build_model_input(request),
            outputDataConfig={"s3OutputDataConfig": {"s3Uri": self.output_s3_uri}},
        )
        invocation_arn = response["invocationArn"]

        logger.info(
            "Submitted video generation",
            invocation_arn=invocation_arn,
            model=request.model_id,
            seeded=request.seed_image is not None,
        )
        return GenerationOperation(name=invocation_arn)

    def poll_sync(self, operation: GenerationOperation) -> GenerationOperation:
        response = self.client.get_async_invoke(invocationArn=operation.name)
        return self.to_operation(operation.name, response)

    @staticmethod
    def to_operation(name: str, response: dict[str, Any]) -> GenerationOperation:
        """Map a get_async_invoke response onto a GenerationOperation."""
        status = response.get("status", STATUS_IN_PROGRESS)

        if status == STATUS_IN_PROGRESS:
            return GenerationOperation(name=name, done=False)

        if status == STATUS_FAILED:
            return GenerationOperation(
                name=name,
                done=True,
                error=response.get("failureMessage") or "Video generation failed.",
            )

        videos = []
        output_uri = (
            response.get("outputDataConfig", {})
            .get("s3OutputDataConfig", {})
            .get("s3Uri")
        )
        if output_uri:
            videos.append(GeneratedVideo(uri=f"{output_uri.rstrip('/')}/{OUTPUT_FILENAME}"))

        return GenerationOperation(name=name, done=True, videos=videos)

    async def submit(self, request: GenerationRequest) -> GenerationOperation:
        return await asyncio.to_thread(self.submit_sync, request)

    async def poll(self, operation: GenerationOperation) -> GenerationOperation:
        return await asyncio.to_thread(self.poll_sync, operation)
