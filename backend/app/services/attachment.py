"""
Attachment selection for image uploads.

Takes the image parts found by the multipart decoder and turns the first one
into a DecodedAttachment. The size check runs after the body has been fully
read into memory, so it bounds what is accepted, not peak memory. The vision
router caps the raw request body before decoding for that.
"""

import re
from typing import Sequence

from app.models.translation import MAX_ATTACHMENT_BYTES, DecodedAttachment
from app.services.multipart import Part

DEFAULT_MEDIA_TYPE = "image/jpeg"

SUPPORTED_IMAGE_TYPES = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
]

_CONTENT_TYPE_PATTERN = re.compile(r"Content-Type: (image/\w+)", re.ASCII)


class NoAttachment(Exception):
    """Raised when the upload contained no usable image part."""
    def __init__(self, message: str = "Please upload an image file", error_code: str = "no_image"):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


class PayloadTooLarge(Exception):
    """Raised when the selected image exceeds the byte ceiling."""
    def __init__(self, size: int, max_bytes: int, error_code: str = "file_too_large"):
        message = f"Image must be smaller than {max_bytes // (1024 * 1024)}MB"
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.size = size
        self.max_bytes = max_bytes


def media_type_from_headers(header_text: str) -> str:
    """Return the ``image/<subtype>`` declared in part headers, or image/jpeg."""
    match = _CONTENT_TYPE_PATTERN.search(header_text)
    return match.group(1) if match else DEFAULT_MEDIA_TYPE


def select(parts: Sequence[Part], max_bytes: int = MAX_ATTACHMENT_BYTES) -> DecodedAttachment:
    """
    Pick the first image part and check its size.

    Args:
        parts: Image parts in order of appearance, as returned by decode().
        max_bytes: Largest accepted body, inclusive. Values above
            MAX_ATTACHMENT_BYTES are clamped to it.

    Raises:
        NoAttachment: ``parts`` is empty.
        PayloadTooLarge: the first part's body is longer than the limit.
    """
    if not parts:
        raise NoAttachment()

    chosen = parts[0]
    size = len(chosen.body)
    limit = min(max_bytes, MAX_ATTACHMENT_BYTES)
    if size > limit:
        raise PayloadTooLarge(size, limit)

    return DecodedAttachment(
        media_type=media_type_from_headers(chosen.header_text),
        content=chosen.body,
        size=size,
    )
