"""Centralized settings management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """AWS-specific configuration."""

    model_config = SettingsConfigDict(env_prefix="AWS_")

    region: str = Field(default="us-east-1", description="AWS region")


class S3Settings(BaseSettings):
    """S3 bucket receiving generated videos."""

    model_config = SettingsConfigDict(env_prefix="S3_")

    bucket_name: str = Field(default="deck-video-output", description="S3 bucket name")
    output_prefix: str = Field(default="videos/", description="S3 prefix for generated videos")


class BedrockSettings(BaseSettings):
    """AWS Bedrock configuration."""

    model_config = SettingsConfigDict(env_prefix="BEDROCK_")

    region: str = Field(default="us-east-1", description="Bedrock region")
    video_model_id: str = Field(
        default="amazon.nova-reel-v1:1",
        description="Video generation model ID",
    )
    vision_model_id: str = Field(
        default="anthropic.claude-3-5-sonnet-20240620-v1:0",
        description="Multimodal model ID used for OCR",
    )
    text_model_id: str = Field(
        default="anthropic.claude-3-haiku-20240307-v1:0",
        description="Text model ID used for keyword suggestions",
    )


class GenerationSettings(BaseSettings):
    """Video generation and polling configuration."""

    model_config = SettingsConfigDict(env_prefix="GENERATION_")

    poll_interval_seconds: float = Field(default=10.0, description="Wait between status polls")
    max_poll_failures: int = Field(default=5, description="Consecutive poll failures before aborting")
    clip_duration_seconds: int = Field(default=6, description="Clip length sent to the model")
    fps: int = Field(default=24, description="Frame rate sent to the model")
    dimension: str = Field(default="1280x720", description="Output resolution sent to the model")
    max_prompt_chars: int = Field(default=512, description="Prompt length accepted by the model")

    @field_validator("poll_interval_seconds")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Poll interval must not be negative")
        return v

    @field_validator("max_poll_failures", "clip_duration_seconds", "fps", "max_prompt_chars")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v


class OCRSettings(BaseSettings):
    """Slide image text recognition configuration."""

    model_config = SettingsConfigDict(env_prefix="OCR_")

    enabled: bool = Field(default=True, description="Enrich slide text with OCR")
    max_concurrent: int = Field(default=4, description="Concurrent recognition requests")
    max_tokens: int = Field(default=1024, description="Max tokens per recognition response")


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="CORS allowed origins",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    format: Literal["json", "console"] = Field(default="json", description="Log format")


class Settings(BaseSettings):
    """Main settings class aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings
    aws: AWSSettings = Field(default_factory=AWSSettings)
    s3: S3Settings = Field(default_factory=S3Settings)
    bedrock: BedrockSettings = Field(default_factory=BedrockSettings)
    generation: GenerationSettings = Field(default_factory=GenerationSettings)
    ocr: OCRSettings = Field(default_factory=OCRSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
