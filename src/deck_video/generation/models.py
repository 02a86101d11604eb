"""Data models for video generation."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from deck_video.ingestion.models import SlideImage


class VideoStyle(str, Enum):
    """Visual style of the generated video."""

    DEFAULT = "Default"
    CINEMATIC = "Cinematic"
    ANIMATION = "Animation"
    DOCUMENTARY = "Documentary"
    VIBRANT = "Vibrant"
    HOLLYWOOD = "Hollywood"  # cinematic-trailer variant
    STOP_MOTION = "Stop-motion"
    ABSTRACT = "Abstract"


class VideoQuality(str, Enum):
    """Resolution tier. Only conveyed through the prompt."""

    SD = "480p"
    HD = "720p"
    FULL_HD = "1080p"


class AspectRatio(str, Enum):
    WIDE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"
    STANDARD = "4:3"
    PORTRAIT_STANDARD = "3:4"


class FrameRate(str, Enum):
    FPS_24 = "24fps"
    FPS_30 = "30fps"
    FPS_60 = "60fps"


class Genre(str, Enum):
    """Narrative genre, used with the Hollywood style only."""

    NONE = "None"
    ACTION = "Action"
    SCI_FI = "Sci-Fi"
    DRAMA = "Drama"
    THRILLER = "Thriller"
    EPIC_FANTASY = "Epic Fantasy"


class Transition(str, Enum):
    """Scene transition. NONE means one independent clip per slide."""

    NONE = "None"
    FADE = "Fade"
    SLIDE = "Slide"
    ZOOM = "Zoom"


class GenerationConfig(BaseModel):
    """Style and output settings chosen for a generation run."""

    model_config = ConfigDict(frozen=True)

    style: VideoStyle = Field(default=VideoStyle.DEFAULT, description="Visual style")
    quality: VideoQuality = Field(default=VideoQuality.HD, description="Resolution tier")
    aspect_ratio: AspectRatio = Field(default=AspectRatio.WIDE, description="Aspect ratio")
    frame_rate: FrameRate = Field(default=FrameRate.FPS_30, description="Frame rate")
    genre: Genre = Field(default=Genre.NONE, description="Genre for the Hollywood style")
    keywords: str = Field(default="", max_length=500, description="Extra style keywords")
    transition: Transition = Field(default=Transition.NONE, description="Scene transition")
    voiceover: bool = Field(default=True, description="Narrate the slide text")
    intro: bool = Field(default=False, description="Trailer intro for the Hollywood style")
    duration_seconds: int = Field(default=15, ge=5, le=60, description="Target duration")

    @property
    def combined(self) -> bool:
        """Whether all slides go into one video."""
        return self.transition != Transition.NONE

    @property
    def is_hollywood(self) -> bool:
        return self.style == VideoStyle.HOLLYWOOD


@dataclass
class GenerationRequest:
    """Request submitted to a video generation service."""

    model_id: str
    prompt: str
    seed_image: SlideImage | None = None
    count: int = 1


@dataclass
class GeneratedVideo:
    """A single media item produced by an operation."""

    uri: str
    thumbnail_uri: str | None = None


@dataclass
class GenerationOperation:
    """State of a long-running generation job."""

    name: str
    done: bool = False
    videos: list[GeneratedVideo] = field(default_factory=list)
    error: str | None = None


@dataclass
class VideoResult:
    """A finished video, for one slide or for the whole deck."""

    slide_number: int
    media_uri: str
    narration_text: str
    thumbnail_uri: str | None = None
    reference_image: SlideImage | None = None
