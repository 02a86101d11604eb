"""Access to generated videos stored in S3.

Provides:
- Fetching a video's bytes by URI
- Presigned URLs for playback in a browser
- Bundling all results into one zip archive for bulk download
"""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from io import BytesIO
from typing import Any
from urllib.parse import urlparse

import structlog

from deck_video.config import get_s3_client
from deck_video.generation.models import VideoResult

logger = structlog.get_logger(__name__)


def filename_for(result: VideoResult, extension: str = "mp4") -> str:
    """Download filename for a result, e.g. ``slide_3.mp4``."""
    return f"slide_{result.slide_number}.{extension}"


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """Split ``s3://bucket/key`` into (bucket, key)."""
    parsed = urlparse(uri)
    if parsed.scheme != "s3" or not parsed.netloc or not parsed.path.lstrip("/"):
        raise ValueError(f"Not an S3 object URI: {uri}")
    return parsed.netloc, parsed.path.lstrip("/")


class VideoStore:
    """Read generated videos from S3.

    Usage:
        store = VideoStore()

        # Playback link
        url = store.presigned_url(result.media_uri)

        # Single file
        data = store.fetch(result.media_uri)

        # Everything as one zip
        archive = store.bundle(results)
    """

    def __init__(self, client: Any | None = None):
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-load S3 client."""
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def fetch(self, uri: str) -> bytes:
        """Download a video.

        Args:
            uri: S3 URI of the video.

        Returns:
            Video bytes.
        """
        bucket, key = parse_s3_uri(uri)
        response = self.client.get_object(Bucket=bucket, Key=key)
        content = response["Body"].read()

        logger.debug("Fetched video", uri=uri, size_bytes=len(content))
        return content

    def presigned_url(self, uri: str, expires_in: int = 3600) -> str:
        """Generate a presigned URL for viewing a video.

        Args:
            uri: S3 URI of the video.
            expires_in: URL lifetime in seconds.

        Returns:
            HTTPS URL.
        """
        bucket, key = parse_s3_uri(uri)
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def bundle(
        self,
        results: list[VideoResult],
        progress: Callable[[str], None] | None = None,
    ) -> bytes:
        """Download all result videos into a single zip archive.

        Args:
            results: Results to bundle, each stored as ``slide_<N>.mp4``.
            progress: Optional callback receiving a message per file.

        Returns:
            Zip archive bytes.
        """
        buffer = BytesIO()

        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for i, result in enumerate(results, 1):
                if progress is not None:
                    progress(f"Fetching video {i} of {len(results)}...")
                archive.writestr(filename_for(result), self.fetch(result.media_uri))

        logger.info("Bundled videos", count=len(results), size_bytes=buffer.tell())
        return buffer.getvalue()
