"""Upload validation: media type, size and filename normalization."""

import re
from pathlib import PurePosixPath
from typing import Optional, Pattern, Union

from rentevent.core.config import settings
from rentevent.core.errors import InvalidMediaError, InvalidNameError
from rentevent.schemas.image import ImagePayload


IMAGE_PATTERN = settings.ALLOWED_IMAGE_PATTERN

_STEM_JUNK = re.compile(r"[^a-z0-9_-]+")


class FileValidator:
    """Classifies uploads and derives the filename sent to the image store."""

    def __init__(self, max_size_bytes: Optional[int] = None):
        self.max_size_bytes = max_size_bytes if max_size_bytes is not None else settings.max_upload_bytes

    def assert_allowed(self, payload: ImagePayload, pattern: Union[str, Pattern[str]] = IMAGE_PATTERN) -> None:
        """Reject payloads whose declared media type does not match pattern.

        Raises:
            InvalidMediaError: On a media type mismatch, an empty payload
                or a payload over the size limit
        """
        media_type = (payload.content_type or "").split(";", 1)[0].strip().lower()
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

        if not media_type or not compiled.fullmatch(media_type):
            raise InvalidMediaError(
                f"Unsupported media type: {payload.content_type or 'unknown'}",
                details={"content_type": payload.content_type, "allowed": compiled.pattern}
            )

        if payload.size == 0:
            raise InvalidMediaError("Empty file", details={"filename": payload.original_name})

        if payload.size > self.max_size_bytes:
            raise InvalidMediaError(
                "File too large",
                details={"max_bytes": self.max_size_bytes, "actual_bytes": payload.size}
            )

    def derive_filename(self, original_name: Optional[str]) -> str:
        """Normalize original_name to "<stem>.<ext>", keeping the extension.

        >>> FileValidator().derive_filename("DJ Luxury (1).PNG")
        'dj-luxury-1.png'

        Raises:
            InvalidNameError: When the name is missing or has no extension
        """
        if not original_name or not original_name.strip():
            raise InvalidNameError("File name is missing", details={"filename": original_name})

        # Browsers on Windows may send the full client path
        name = PurePosixPath(original_name.strip().replace("\\", "/")).name
        stem, dot, extension = name.rpartition(".")
        extension = extension.lower()

        if not dot or not extension or not extension.isalnum():
            raise InvalidNameError(
                f"File name has no extension: {original_name}",
                details={"filename": original_name}
            )

        stem = _STEM_JUNK.sub("-", stem.lower()).strip("-_")
        if not stem:
            raise InvalidNameError(
                f"File name has no usable stem: {original_name}",
                details={"filename": original_name}
            )

        return f"{stem}.{extension}"

    def validate(self, payload: ImagePayload, pattern: Union[str, Pattern[str]] = IMAGE_PATTERN) -> str:
        """assert_allowed then derive_filename; returns the filename."""
        self.assert_allowed(payload, pattern)
        return self.derive_filename(payload.original_name)
