"""Ingestion module for presentation extraction and OCR enrichment."""

from deck_video.ingestion.archive import ArchiveAccessor, ArchiveHandle
from deck_video.ingestion.models import (
    SelectionMap,
    SlideImage,
    SlideRecord,
    add_image,
    default_selections,
    selected_image,
)
from deck_video.ingestion.ocr import BedrockTextRecognizer, OcrEnricher, TextRecognizer
from deck_video.ingestion.slide_extractor import SlideExtractor, extract_slides

__all__ = [
    "ArchiveAccessor",
    "ArchiveHandle",
    "SelectionMap",
    "SlideImage",
    "SlideRecord",
    "add_image",
    "default_selections",
    "selected_image",
    "SlideExtractor",
    "extract_slides",
    "BedrockTextRecognizer",
    "OcrEnricher",
    "TextRecognizer",
]
