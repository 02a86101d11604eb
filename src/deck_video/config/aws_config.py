"""AWS client configuration and initialization."""

from functools import lru_cache
from typing import Any

import boto3
from botocore.config import Config

from deck_video.config.settings import get_settings


def get_boto_config() -> Config:
    """Get boto3 config with retry settings."""
    return Config(
        retries={
            "max_attempts": 3,
            "mode": "adaptive",
        },
        connect_timeout=10,
        # Vision OCR over full-size slide images can run past 60s
        read_timeout=120,
    )


@lru_cache
def get_s3_client() -> Any:
    """Get cached S3 client."""
    settings = get_settings()
    return boto3.client(
        "s3",
        region_name=settings.aws.region,
        config=get_boto_config(),
    )


@lru_cache
def get_bedrock_runtime_client() -> Any:
    """Get cached Bedrock Runtime client for model invocations."""
    settings = get_settings()
    return boto3.client(
        "bedrock-runtime",
        region_name=settings.bedrock.region,
        config=get_boto_config(),
    )


def clear_client_cache() -> None:
    """Clear all cached clients. Useful for testing."""
    get_s3_client.cache_clear()
    get_bedrock_runtime_client.cache_clear()
