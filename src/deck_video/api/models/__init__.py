"""API request and response models."""

from deck_video.api.models.request_models import (
    ArchiveRequest,
    GenerateRequest,
    KeywordRequest,
    SlideImagePayload,
    SlidePayload,
    VideoResultPayload,
)
from deck_video.api.models.response_models import (
    ExtractResponse,
    GenerateResponse,
    GenerationErrorResponse,
    HealthResponse,
    KeywordResponse,
    PlaybackResponse,
)

__all__ = [
    "ArchiveRequest",
    "GenerateRequest",
    "KeywordRequest",
    "SlideImagePayload",
    "SlidePayload",
    "VideoResultPayload",
    "ExtractResponse",
    "GenerateResponse",
    "GenerationErrorResponse",
    "HealthResponse",
    "KeywordResponse",
    "PlaybackResponse",
]
