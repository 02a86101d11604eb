"""Request models for the API."""

from pydantic import BaseModel, Field

from deck_video.generation.models import GenerationConfig, Genre, VideoResult
from deck_video.ingestion.models import SlideImage, SlideRecord


class SlideImagePayload(BaseModel):
    """Base64 image as exchanged with clients."""

    data: str = Field(..., min_length=1, description="Base64-encoded image bytes")
    mime_type: str = Field("image/png", description="Image MIME type")

    @classmethod
    def from_image(cls, image: SlideImage) -> "SlideImagePayload":
        return cls(data=image.data, mime_type=image.mime_type)

    def to_image(self) -> SlideImage:
        return SlideImage(data=self.data, mime_type=self.mime_type)


class SlidePayload(BaseModel):
    """A reviewed slide sent back for generation."""

    slide_number: int = Field(..., ge=1, description="1-based slide position in the deck")
    text: str = Field("", description="Narration text")
    images: list[SlideImagePayload] = Field(default_factory=list, description="Slide images")

    @classmethod
    def from_record(cls, record: SlideRecord) -> "SlidePayload":
        return cls(
            slide_number=record.slide_number,
            text=record.text,
            images=[SlideImagePayload.from_image(i) for i in record.images],
        )

    def to_record(self) -> SlideRecord:
        return SlideRecord(
            slide_number=self.slide_number,
            text=self.text,
            images=[i.to_image() for i in self.images],
        )


class GenerateRequest(BaseModel):
    """Request model for video generation."""

    slides: list[SlidePayload] = Field(..., min_length=1, description="Slides to render, in deck order")
    selections: dict[int, int] = Field(
        default_factory=dict,
        description="Slide number to selected image index",
    )
    config: GenerationConfig = Field(default_factory=GenerationConfig)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "slides": [{"slide_number": 1, "text": "Quarterly results", "images": []}],
                    "selections": {},
                    "config": {"style": "Documentary", "transition": "None", "duration_seconds": 15},
                }
            ]
        }
    }


class KeywordRequest(BaseModel):
    """Request model for genre keyword suggestions."""

    genre: Genre = Field(..., description="Genre to suggest keywords for")


class VideoResultPayload(BaseModel):
    """A generated video as exchanged with clients."""

    slide_number: int
    media_uri: str
    narration_text: str
    thumbnail_uri: str | None = None
    reference_image: SlideImagePayload | None = None

    @classmethod
    def from_result(cls, result: VideoResult) -> "VideoResultPayload":
        return cls(
            slide_number=result.slide_number,
            media_uri=result.media_uri,
            narration_text=result.narration_text,
            thumbnail_uri=result.thumbnail_uri,
            reference_image=(
                SlideImagePayload.from_image(result.reference_image)
                if result.reference_image
                else None
            ),
        )

    def to_result(self) -> VideoResult:
        return VideoResult(
            slide_number=self.slide_number,
            media_uri=self.media_uri,
            narration_text=self.narration_text,
            thumbnail_uri=self.thumbnail_uri,
            reference_image=self.reference_image.to_image() if self.reference_image else None,
        )


class ArchiveRequest(BaseModel):
    """Request model for bundling results into a zip download."""

    results: list[VideoResultPayload] = Field(..., min_length=1)
