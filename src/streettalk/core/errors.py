"""Error taxonomy.

Only media and persistence errors ever reach a caller. Dataset and link
problems are recorded and downgraded where they occur, and a missing
sanitizer switches rendering to degraded mode.
"""

from __future__ import annotations


class StreetTalkError(Exception):
    """Base class for all StreetTalk errors."""


class MalformedDatasetRecord(StreetTalkError):
    """An emoji dataset record has no usable glyph or name."""


class UnsafeLink(StreetTalkError):
    """A rendered anchor points outside the allowed schemes."""

    def __init__(self, href: str) -> None:
        super().__init__(f"Link target not allowed: {href!r}")
        self.href = href


class SanitizerUnavailable(StreetTalkError):
    """The HTML sanitizer has not been loaded (or failed to load)."""


class MediaError(StreetTalkError):
    """An attachment could not be turned into a media item."""


class FileReadFailure(MediaError):
    """The attachment payload is empty, oversized or unreadable."""


class ImageDecodeFailure(MediaError):
    """The attachment claims to be an image but cannot be decoded."""


class UnsupportedMediaType(MediaError):
    """The attachment is neither an image nor a video."""


class MutationConflict(StreetTalkError):
    """An atomic mutation kept losing to concurrent writers."""
