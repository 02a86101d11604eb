"""Submit generation jobs and poll them to completion.

State machine: SUBMITTED -> poll loop -> DONE, or ABORTED after
``max_poll_failures`` consecutive polling errors. A successful poll resets
the failure budget.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog
from tenacity import AsyncRetrying, RetryCallState, RetryError, stop_after_attempt, wait_fixed

from deck_video.config.settings import get_settings
from deck_video.errors import GenerationFailed, PollingExhausted, RemoteRejected, classify_remote_error
from deck_video.generation.bedrock_client import VideoGenerationClient
from deck_video.generation.models import GeneratedVideo, GenerationOperation, GenerationRequest
from deck_video.ingestion.models import SlideImage

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class GenerationOrchestrator:
    """Drive one generation request from submission to a media reference."""

    def __init__(
        self,
        client: VideoGenerationClient,
        model_id: str | None = None,
        poll_interval: float | None = None,
        max_poll_failures: int | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize orchestrator.

        Args:
            client: Generation service client.
            model_id: Model identifier put on requests.
            poll_interval: Seconds to wait between polls.
            max_poll_failures: Consecutive poll failures tolerated.
            sleep: Async sleep function, replaceable in tests.
        """
        settings = get_settings()
        self.client = client
        self.model_id = model_id or settings.bedrock.video_model_id
        self.poll_interval = (
            poll_interval if poll_interval is not None else settings.generation.poll_interval_seconds
        )
        self.max_poll_failures = max_poll_failures or settings.generation.max_poll_failures
        self._sleep = sleep

    def build_request(self, prompt: str, seed_image: SlideImage | None = None) -> GenerationRequest:
        return GenerationRequest(model_id=self.model_id, prompt=prompt, seed_image=seed_image)

    async def submit_and_await(self, request: GenerationRequest) -> GeneratedVideo:
        """Submit a request and wait for its first generated video.

        Args:
            request: Generation request.

        Returns:
            The first generated video of the completed operation.

        Raises:
            RemoteRejected: Submission failed or the operation reported an error.
            PollingExhausted: Polling failed too many times in a row.
            GenerationFailed: Operation finished without a media reference.
        """
        try:
            operation = await self.client.submit(request)
        except Exception as e:
            raise self._rejected(str(e), operation=None) from e

        polls = 0
        while not operation.done:
            await self._sleep(self.poll_interval)
            operation = await self._poll(operation)
            polls += 1

        if operation.error:
            raise self._rejected(operation.error, operation=operation)

        if not operation.videos or not operation.videos[0].uri:
            logger.error("Operation completed without media", operation=operation.name)
            raise GenerationFailed()

        video = operation.videos[0]
        logger.info("Video generation complete", operation=operation.name, polls=polls, uri=video.uri)
        return video

    async def _poll(self, operation: GenerationOperation) -> GenerationOperation:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_poll_failures),
            wait=wait_fixed(self.poll_interval),
            sleep=self._sleep,
            before_sleep=self._log_poll_failure,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self.client.poll(operation)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                "Polling exhausted",
                operation=operation.name,
                attempts=self.max_poll_failures,
                error=str(last_error),
            )
            raise PollingExhausted(self.max_poll_failures, last_error) from last_error

    @staticmethod
    def _log_poll_failure(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Polling for video operation failed, retrying",
            attempt=retry_state.attempt_number,
            error=str(error),
        )

    @staticmethod
    def _rejected(raw_message: str, operation: GenerationOperation | None) -> RemoteRejected:
        rejected = classify_remote_error(raw_message)
        logger.error(
            "Video generation rejected",
            operation=operation.name if operation else None,
            category=rejected.category.value,
            raw_error=raw_message,
        )
        return rejected
