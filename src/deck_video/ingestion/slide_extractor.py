"""Slide text and image extraction from PPTX archives.

Slides are located by probing ``ppt/slides/slide<N>.xml`` from N=1 upward.
The container declares no slide count, so the first missing position marks
the end of the deck: a deck with slide1 and slide3 but no slide2 yields only
slide1.
"""

import posixpath
from collections.abc import Callable

import structlog

from deck_video.errors import NoContentFound
from deck_video.ingestion.archive import ArchiveAccessor, ArchiveHandle
from deck_video.ingestion.models import SlideImage, SlideRecord

logger = structlog.get_logger(__name__)

DRAWINGML_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

TEXT_RUN_TAG = f"{{{DRAWINGML_NS}}}t"
BLIP_TAG = f"{{{DRAWINGML_NS}}}blip"
EMBED_ATTR = f"{{{RELATIONSHIPS_NS}}}embed"
RELATIONSHIP_TAG = f"{{{PACKAGE_RELS_NS}}}Relationship"

SLIDES_DIR = "ppt/slides"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}
DEFAULT_MIME_TYPE = "image/png"

ProgressCallback = Callable[[str], None]


def slide_path(slide_number: int) -> str:
    return f"{SLIDES_DIR}/slide{slide_number}.xml"


def slide_rels_path(slide_number: int) -> str:
    return f"{SLIDES_DIR}/_rels/slide{slide_number}.xml.rels"


def thumbnail_path(slide_number: int) -> str:
    return f"ppt/thumbnails/thumbnail{slide_number}.jpeg"


def mime_type_for(path: str) -> str:
    """Infer an image MIME type from a file extension."""
    extension = posixpath.splitext(path)[1].lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


class SlideExtractor:
    """Walk the slides of an archive and collect their text and images."""

    def __init__(
        self,
        accessor: ArchiveAccessor | None = None,
        progress: ProgressCallback | None = None,
    ):
        """Initialize extractor.

        Args:
            accessor: Archive accessor used for entry lookups.
            progress: Optional callback receiving one message per slide.
        """
        self.accessor = accessor or ArchiveAccessor()
        self.progress = progress

    def extract(self, handle: ArchiveHandle) -> list[SlideRecord]:
        """Extract all slides that carry text or images.

        Args:
            handle: Opened archive.

        Returns:
            Slide records in ascending slide number order.

        Raises:
            NoContentFound: If no slide has text or images.
            CorruptEntry: If a present entry cannot be parsed.
        """
        slides: list[SlideRecord] = []
        slide_number = 1

        while True:
            root = self.accessor.read_xml(handle, slide_path(slide_number))
            if root is None:
                break

            self._report(f"Parsing slide {slide_number}...")
            record = self._extract_slide(handle, root, slide_number)

            if record.has_content:
                slides.append(record)
            else:
                logger.debug("Dropping empty slide", slide_number=slide_number)

            slide_number += 1

        logger.info(
            "Slide extraction complete",
            probed_slides=slide_number - 1,
            kept_slides=len(slides),
            images=sum(len(s.images) for s in slides),
        )

        if not slides:
            raise NoContentFound()

        return slides

    def _extract_slide(self, handle: ArchiveHandle, root, slide_number: int) -> SlideRecord:
        text = self._extract_text(root)
        relationships = self._image_relationships(handle, slide_number)
        images = self._extract_images(handle, root, relationships, slide_number)
        thumbnail = self.accessor.read_binary(handle, thumbnail_path(slide_number))

        return SlideRecord(
            slide_number=slide_number,
            text=text,
            images=images,
            thumbnail=thumbnail,
        )

    def _extract_text(self, root) -> str:
        """Join all text runs in document order."""
        runs = [node.text or "" for node in root.iter(TEXT_RUN_TAG)]
        return " ".join(runs).strip()

    def _image_relationships(self, handle: ArchiveHandle, slide_number: int) -> dict[str, str]:
        """Map relationship ids to media entry paths for image relationships."""
        rels_root = self.accessor.read_xml(handle, slide_rels_path(slide_number))
        if rels_root is None:
            return {}

        relationships = {}
        for rel in rels_root.iter(RELATIONSHIP_TAG):
            if not (rel.get("Type") or "").endswith("/image"):
                continue
            if rel.get("TargetMode") == "External":
                continue

            rel_id = rel.get("Id")
            target = rel.get("Target")
            if rel_id and target:
                relationships[rel_id] = self._resolve_target(target)

        return relationships

    @staticmethod
    def _resolve_target(target: str) -> str:
        """Resolve a relationship target against the slides directory."""
        if target.startswith("/"):
            return target.lstrip("/")
        return posixpath.normpath(posixpath.join(SLIDES_DIR, target))

    def _extract_images(
        self,
        handle: ArchiveHandle,
        root,
        relationships: dict[str, str],
        slide_number: int,
    ) -> list[SlideImage]:
        images = []

        for blip in root.iter(BLIP_TAG):
            embed_id = blip.get(EMBED_ATTR)
            media_path = relationships.get(embed_id) if embed_id else None
            if media_path is None:
                continue

            content = self.accessor.read_binary(handle, media_path)
            if content is None:
                logger.debug(
                    "Image target missing from archive",
                    slide_number=slide_number,
                    path=media_path,
                )
                continue

            images.append(SlideImage.from_bytes(content, mime_type_for(media_path)))

        return images

    def _report(self, message: str) -> None:
        if self.progress is not None:
            self.progress(message)


def extract_slides(file_bytes: bytes, progress: ProgressCallback | None = None) -> list[SlideRecord]:
    """Open an uploaded presentation and extract its slides.

    Args:
        file_bytes: Raw PPTX content.
        progress: Optional progress callback.

    Returns:
        Extracted slide records.
    """
    accessor = ArchiveAccessor()
    with accessor.open(file_bytes) as handle:
        return SlideExtractor(accessor, progress=progress).extract(handle)
