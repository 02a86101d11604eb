"""Unit tests for submitting and polling generation jobs."""

import pytest

from conftest import FakeVideoClient
from deck_video.errors import GenerationFailed, PollingExhausted, RejectionCategory, RemoteRejected


class TestGenerationOrchestrator:
    """Tests for the submit/poll state machine."""

    @pytest.mark.asyncio
    async def test_polls_until_done(self, make_orchestrator, fake_sleep):
        client = FakeVideoClient(script=["pending", "pending", "done"])
        orchestrator = make_orchestrator(client)

        video = await orchestrator.submit_and_await(orchestrator.build_request("A prompt"))

        assert video.uri == "s3://test-bucket/videos/op-1/output.mp4"
        assert client.poll_count == 3
        assert fake_sleep.delays == [0, 0, 0]

    @pytest.mark.asyncio
    async def test_request_carries_model_and_seed(self, make_orchestrator):
        from deck_video.ingestion.models import SlideImage

        client = FakeVideoClient()
        orchestrator = make_orchestrator(client)
        image = SlideImage.from_bytes(b"seed")

        await orchestrator.submit_and_await(orchestrator.build_request("Prompt", image))

        request = client.requests[0]
        assert request.model_id == "test-video-model"
        assert request.prompt == "Prompt"
        assert request.seed_image == image
        assert request.count == 1

    @pytest.mark.asyncio
    async def test_survives_four_transient_failures(self, make_orchestrator):
        client = FakeVideoClient(script=["fail"] * 4 + ["done"])
        orchestrator = make_orchestrator(client, max_poll_failures=5)

        video = await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert video.uri.endswith("/output.mp4")
        assert client.poll_count == 5

    @pytest.mark.asyncio
    async def test_five_consecutive_failures_exhaust_polling(self, make_orchestrator):
        client = FakeVideoClient(script=["fail"] * 5 + ["done"])
        orchestrator = make_orchestrator(client, max_poll_failures=5)

        with pytest.raises(PollingExhausted) as exc_info:
            await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert exc_info.value.attempts == 5
        assert isinstance(exc_info.value.last_error, ConnectionError)
        assert "failed after 5 retries" in str(exc_info.value)
        assert client.poll_count == 5

    @pytest.mark.asyncio
    async def test_successful_poll_resets_failure_budget(self, make_orchestrator):
        """Failures only count when consecutive."""
        client = FakeVideoClient(script=["fail"] * 4 + ["pending"] + ["fail"] * 4 + ["done"])
        orchestrator = make_orchestrator(client, max_poll_failures=5)

        video = await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert video.uri
        assert client.poll_count == 10

    @pytest.mark.asyncio
    async def test_done_without_video_fails(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeVideoClient(script=["empty"]))

        with pytest.raises(GenerationFailed) as exc_info:
            await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert "without providing a video link" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_operation_error_is_classified(self, make_orchestrator):
        client = FakeVideoClient(script=["pending", "error:Request blocked by content filter"])
        orchestrator = make_orchestrator(client)

        with pytest.raises(RemoteRejected) as exc_info:
            await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert exc_info.value.category == RejectionCategory.SAFETY
        assert exc_info.value.raw_message == "Request blocked by content filter"

    @pytest.mark.asyncio
    async def test_submit_failure_is_classified(self, make_orchestrator):
        client = FakeVideoClient(
            submit_errors={0: ValueError("ValidationException: prompt is malformed")}
        )
        orchestrator = make_orchestrator(client)

        with pytest.raises(RemoteRejected) as exc_info:
            await orchestrator.submit_and_await(orchestrator.build_request("Prompt"))

        assert exc_info.value.category == RejectionCategory.INVALID_ARGUMENT
        assert "The API reported: ValidationException" in str(exc_info.value)
        assert client.poll_count == 0
