"""
What the storage backend needs from its host attachment.

The attachment model itself (styles, path templates, lifecycle hooks) lives
in the hosting framework. This module only describes the handful of calls
the backend makes into it, plus helpers for the file objects it queues.
"""

import mimetypes
from typing import BinaryIO, Optional, Protocol

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Attachment(Protocol):
    """
    Protocol for the attachment that owns a storage backend.

    path() returns the already-interpolated storage key for a style;
    the backend never builds keys itself.
    """

    default_style: str
    original_filename: Optional[str]

    def path(self, style: Optional[str] = None) -> Optional[str]:
        ...

    def url(self, style: Optional[str] = None) -> str:
        ...

    def after_flush_writes(self) -> None:
        """Called once all queued writes are stored, to drop temp files."""
        ...


def content_type_of(file: BinaryIO) -> str:
    """Content type of a queued file, guessed from its name if not set."""
    content_type = getattr(file, "content_type", None)
    if content_type:
        return content_type

    name = getattr(file, "name", None)
    if isinstance(name, str):
        guessed, _ = mimetypes.guess_type(name)
        if guessed:
            return guessed

    return DEFAULT_CONTENT_TYPE


def rewind(file: BinaryIO) -> None:
    if hasattr(file, "seek"):
        file.seek(0)
