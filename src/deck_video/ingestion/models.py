"""Data models for slide extraction."""

import base64
from dataclasses import dataclass, field, replace

# Slide number -> index into that slide's images
SelectionMap = dict[int, int]


@dataclass(frozen=True)
class SlideImage:
    """An image attached to a slide, carried as base64 text."""

    data: str
    mime_type: str = "image/png"

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = "image/png") -> "SlideImage":
        """Build an image from raw bytes."""
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)

    def raw_bytes(self) -> bytes:
        """Decode the base64 payload."""
        return base64.b64decode(self.data)

    @property
    def format(self) -> str:
        """Short format name ("png" or "jpeg")."""
        return "jpeg" if self.mime_type == "image/jpeg" else "png"


@dataclass
class SlideRecord:
    """Text and images extracted from one slide."""

    slide_number: int
    text: str = ""
    images: list[SlideImage] = field(default_factory=list)
    thumbnail: bytes | None = None

    @property
    def has_content(self) -> bool:
        """Slide carries text or at least one image."""
        return bool(self.text.strip()) or len(self.images) > 0

    def with_text_appended(self, extra: str) -> "SlideRecord":
        """Return a copy with extra text appended after a space.

        Blank extra text returns the record unchanged.
        """
        extra = extra.strip()
        if not extra:
            return self
        text = f"{self.text} {extra}" if self.text else extra
        return replace(self, text=text)

    def with_image(self, image: SlideImage) -> "SlideRecord":
        """Return a copy with the image appended to the image list."""
        return replace(self, images=[*self.images, image])


def default_selections(slides: list[SlideRecord]) -> SelectionMap:
    """Select the first image of every slide that has one."""
    return {slide.slide_number: 0 for slide in slides if slide.images}


def selected_image(slide: SlideRecord, selections: SelectionMap) -> SlideImage | None:
    """Get the selected image for a slide.

    Missing selections and out-of-range indexes resolve to None.
    """
    index = selections.get(slide.slide_number)
    if index is None or not 0 <= index < len(slide.images):
        return None
    return slide.images[index]


def add_image(
    slides: list[SlideRecord],
    selections: SelectionMap,
    slide_number: int,
    image: SlideImage,
) -> tuple[list[SlideRecord], SelectionMap]:
    """Append a user-supplied image to a slide and select it.

    Args:
        slides: Current slide records.
        selections: Current image selections.
        slide_number: Slide receiving the image.
        image: Image to append.

    Returns:
        Tuple of (updated slides, updated selections). Inputs are not modified.
    """
    updated_slides = []
    updated_selections = dict(selections)

    for slide in slides:
        if slide.slide_number == slide_number:
            slide = slide.with_image(image)
            updated_selections[slide_number] = len(slide.images) - 1
        updated_slides.append(slide)

    return updated_slides, updated_selections
