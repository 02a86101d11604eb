"""Delivery of generated videos."""

from deck_video.delivery.video_store import VideoStore, filename_for, parse_s3_uri

__all__ = ["VideoStore", "filename_for", "parse_s3_uri"]
