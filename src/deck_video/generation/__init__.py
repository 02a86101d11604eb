"""Video generation: prompts, remote jobs and result assembly."""

from deck_video.generation.assembler import ResultAssembler
from deck_video.generation.bedrock_client import BedrockVideoClient, VideoGenerationClient
from deck_video.generation.keywords import KeywordSuggester
from deck_video.generation.models import (
    AspectRatio,
    FrameRate,
    GeneratedVideo,
    GenerationConfig,
    GenerationOperation,
    GenerationRequest,
    Genre,
    Transition,
    VideoQuality,
    VideoResult,
    VideoStyle,
)
from deck_video.generation.orchestrator import GenerationOrchestrator
from deck_video.generation.prompts import PromptComposer

__all__ = [
    "AspectRatio",
    "FrameRate",
    "GeneratedVideo",
    "GenerationConfig",
    "GenerationOperation",
    "GenerationRequest",
    "Genre",
    "Transition",
    "VideoQuality",
    "VideoResult",
    "VideoStyle",
    "BedrockVideoClient",
    "VideoGenerationClient",
    "GenerationOrchestrator",
    "KeywordSuggester",
    "PromptComposer",
    "ResultAssembler",
]
