"""Error taxonomy for extraction and video generation.

Extraction errors abort the pipeline and are surfaced verbatim. Errors coming
back from the remote generation service are rewritten into user-facing
guidance by ``classify_remote_error``; the raw message is kept on the
exception and written to the log.
"""

from enum import Enum


class DeckVideoError(Exception):
    """Base class for all Deck Video errors."""


class ExtractionError(DeckVideoError):
    """Presentation could not be turned into slide records."""


class MalformedArchive(ExtractionError):
    """Uploaded file is not a readable compressed archive."""

    def __init__(self, reason: str = ""):
        message = "The file could not be read as a presentation archive."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class CorruptEntry(ExtractionError):
    """An archive entry exists but cannot be read or parsed."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Archive entry '{path}' is corrupt"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoContentFound(ExtractionError):
    """Extraction finished without a single slide carrying text or images."""

    def __init__(self):
        super().__init__("Could not find any slides with text or image content in the presentation.")


class GenerationError(DeckVideoError):
    """Video generation did not produce a usable result."""


class GenerationFailed(GenerationError):
    """Remote operation completed but returned no media reference."""

    def __init__(self, reason: str = "API operation completed without providing a video link."):
        self.reason = reason
        super().__init__(reason)


class PollingExhausted(GenerationError):
    """Too many consecutive failures while polling an operation."""

    def __init__(self, attempts: int, last_error: BaseException | None = None):
        self.attempts = attempts
        self.last_error = last_error
        message = f"Polling for video status failed after {attempts} retries"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)


class RejectionCategory(Enum):
    """User-actionable categories for remote failures."""

    SAFETY = "safety"
    INVALID_ARGUMENT = "invalid_argument"
    INTERNAL = "internal"
    UNCLASSIFIED = "unclassified"


class RemoteRejected(GenerationError):
    """Remote service refused or failed a request."""

    def __init__(self, category: RejectionCategory, message: str, raw_message: str):
        self.category = category
        self.raw_message = raw_message
        super().__init__(message)


class KeywordSuggestionFailed(DeckVideoError):
    """Keyword suggestion request failed."""

    def __init__(self, reason: str):
        super().__init__(f"AI keyword generation failed. {reason}")


# Substrings are matched case-insensitively, first category wins.
_CLASSIFIERS: list[tuple[RejectionCategory, tuple[str, ...]]] = [
    (RejectionCategory.SAFETY, ("safety", "content filter", "blocked")),
    (RejectionCategory.INVALID_ARGUMENT, ("invalid argument", "validationexception", "malformed")),
    (RejectionCategory.INTERNAL, ("internal", "service unavailable", "serviceunavailable")),
]


def classify_remote_error(raw_message: str) -> RemoteRejected:
    """Rewrite a raw remote failure message into a user-facing error.

    Args:
        raw_message: Message reported by the remote service or SDK.

    Returns:
        RemoteRejected carrying the category, guidance text and raw message.
    """
    lowered = raw_message.lower()

    category = RejectionCategory.UNCLASSIFIED
    for candidate, markers in _CLASSIFIERS:
        if any(marker in lowered for marker in markers):
            category = candidate
            break

    if category == RejectionCategory.SAFETY:
        message = "The prompt was blocked due to a safety policy. Please modify the slide text or keywords."
    elif category == RejectionCategory.INVALID_ARGUMENT:
        message = f"The request was invalid. The API reported: {raw_message}"
    elif category == RejectionCategory.INTERNAL:
        message = "An internal server error occurred with the API. Please try again later."
    else:
        message = raw_message or "An unknown error occurred."

    return RemoteRejected(category=category, message=message, raw_message=raw_message)
