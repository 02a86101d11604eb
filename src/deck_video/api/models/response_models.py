"""Response models for the API."""

from pydantic import BaseModel, Field

from deck_video.api.models.request_models import SlidePayload, VideoResultPayload


class ExtractResponse(BaseModel):
    """Response model for slide extraction."""

    filename: str = Field(description="Uploaded filename")
    slides: list[SlidePayload] = Field(description="Slides with text or images")
    selections: dict[int, int] = Field(description="Default image selection per slide")
    processing_time_ms: int = Field(description="Processing time in milliseconds")


class GenerateResponse(BaseModel):
    """Response model for video generation."""

    results: list[VideoResultPayload] = Field(description="Generated videos in slide order")
    combined: bool = Field(description="Whether a single combined video was produced")
    processing_time_ms: int = Field(description="Processing time in milliseconds")


class GenerationErrorResponse(BaseModel):
    """Error body for failed generation runs."""

    detail: str = Field(description="User-facing error message")
    category: str | None = Field(None, description="Rejection category, if classified")
    results: list[VideoResultPayload] = Field(
        default_factory=list,
        description="Results completed before the failure",
    )


class KeywordResponse(BaseModel):
    """Response model for keyword suggestions."""

    genre: str
    keywords: str


class PlaybackResponse(BaseModel):
    """Presigned playback URL for a video."""

    media_uri: str
    url: str
    expires_in: int


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(description="Overall health status")
    version: str = Field(description="API version")
    components: dict[str, str] = Field(description="Component status")
