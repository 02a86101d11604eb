"""Configuration module for Deck Video."""

from deck_video.config.aws_config import (
    clear_client_cache,
    get_bedrock_runtime_client,
    get_s3_client,
)
from deck_video.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "get_s3_client",
    "get_bedrock_runtime_client",
    "clear_client_cache",
]
