"""Unit tests for generated video access."""

import zipfile
from io import BytesIO

import pytest

from deck_video.delivery.video_store import VideoStore, filename_for, parse_s3_uri
from deck_video.generation.models import VideoResult


def result(slide_number, key):
    return VideoResult(
        slide_number=slide_number,
        media_uri=f"s3://test-bucket/{key}",
        narration_text=f"Slide {slide_number}",
    )


class TestHelpers:
    """Tests for naming and URI parsing."""

    def test_filename(self):
        assert filename_for(result(7, "videos/a/output.mp4")) == "slide_7.mp4"

    def test_parse_s3_uri(self):
        assert parse_s3_uri("s3://bucket/videos/abc/output.mp4") == ("bucket", "videos/abc/output.mp4")

    @pytest.mark.parametrize(
        "uri",
        ["https://bucket/videos/output.mp4", "s3://bucket", "s3:///key.mp4", "not a uri"],
    )
    def test_rejects_non_object_uris(self, uri):
        with pytest.raises(ValueError):
            parse_s3_uri(uri)


class TestVideoStore:
    """Tests for S3-backed video access."""

    def test_fetch(self, mock_s3_client):
        store = VideoStore(client=mock_s3_client)

        assert store.fetch("s3://test-bucket/videos/a/output.mp4") == b"video:videos/a/output.mp4"
        mock_s3_client.get_object.assert_called_once_with(Bucket="test-bucket", Key="videos/a/output.mp4")

    def test_presigned_url(self, mock_s3_client):
        store = VideoStore(client=mock_s3_client)

        url = store.presigned_url("s3://test-bucket/videos/a/output.mp4", expires_in=60)

        assert url.startswith("https://")
        mock_s3_client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "test-bucket", "Key": "videos/a/output.mp4"},
            ExpiresIn=60,
        )

    def test_bundle(self, mock_s3_client):
        store = VideoStore(client=mock_s3_client)
        messages = []

        archive = store.bundle(
            [result(1, "videos/a/output.mp4"), result(3, "videos/b/output.mp4")],
            progress=messages.append,
        )

        with zipfile.ZipFile(BytesIO(archive)) as bundle:
            assert bundle.namelist() == ["slide_1.mp4", "slide_3.mp4"]
            assert bundle.read("slide_3.mp4") == b"video:videos/b/output.mp4"
        assert messages == ["Fetching video 1 of 2...", "Fetching video 2 of 2..."]
