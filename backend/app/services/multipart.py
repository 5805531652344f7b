"""
Minimal multipart/form-data decoder.

Recovers image parts from a fully buffered request body without going through
a general-purpose multipart library. Only the subset needed to pull one
binary attachment out of a browser upload is supported.

Public API:
  extract_boundary(content_type)  -> bytes
  decode(buffer, boundary)        -> list[Part]
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MalformedMultipart(Exception):
    """Raised when the content type or boundary token makes decoding impossible."""
    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Part:
    """One boundary-delimited segment. Only valid for the decode call that produced it."""
    header_text: str
    body: bytes


class _State(Enum):
    PREAMBLE = "preamble"
    IN_PART = "in_part"
    DONE = "done"


# (haystack, needle, start) -> index or -1, same contract as bytes.find
ByteSearch = Callable[[bytes, bytes, int], int]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MULTIPART_FORM_DATA = "multipart/form-data"
BOUNDARY_PARAM = "boundary="
HEADER_SEPARATOR = b"\r\n\r\n"
IMAGE_CONTENT_TYPE_MARKER = "Content-Type: image/"

_CRLF = b"\r\n"

# Every body is followed by the CRLF that introduces the next delimiter.
_TRAILING_CRLF_LEN = len(_CRLF)


def _bytes_find(haystack: bytes, needle: bytes, start: int) -> int:
    return haystack.find(needle, start)


def extract_boundary(content_type: str) -> bytes:
    """
    Pull the boundary token out of a ``multipart/form-data`` content type.

    The token is everything after ``boundary=``, taken verbatim: trailing
    parameters are not trimmed.

    Raises:
        MalformedMultipart: not a multipart/form-data header, or no token.
    """
    if MULTIPART_FORM_DATA not in (content_type or ""):
        raise MalformedMultipart("Please upload an image file", "invalid_content_type")

    _, found, token = content_type.partition(BOUNDARY_PARAM)
    if not found or not token:
        raise MalformedMultipart("Boundary not found", "boundary_not_found")

    # Header values arrive latin-1 decoded; encoding back recovers the raw bytes.
    return token.encode("latin-1")


def _split_segment(segment: bytes) -> Part | None:
    """Split a segment into headers and body, or None if it has no blank line."""
    header_end = segment.find(HEADER_SEPARATOR)
    if header_end == -1:
        return None

    header_text = segment[:header_end].decode("utf-8", errors="replace")
    body = segment[header_end + len(HEADER_SEPARATOR):]
    return Part(header_text=header_text, body=body[:len(body) - _TRAILING_CRLF_LEN])


def _next_delimiter(buffer: bytes, delimiter: bytes, start: int, search: ByteSearch) -> int:
    """Find the next delimiter at or after ``start`` that begins a line."""
    match = search(buffer, delimiter, start)
    while match != -1 and buffer[match - len(_CRLF):match] != _CRLF:
        match = search(buffer, delimiter, match + 1)
    return match


def decode(buffer: bytes, boundary: bytes, search: ByteSearch = _bytes_find) -> list[Part]:
    """
    Split ``buffer`` on ``--boundary`` and return the image parts in order.

    The scan is a small state machine: PREAMBLE until the first delimiter,
    IN_PART between delimiters, DONE once no further delimiter is found.
    Each search resumes right after the previously matched delimiter, so
    bytes already consumed are never rescanned. The preamble and whatever
    follows the last delimiter are never emitted.

    The first delimiter may appear anywhere. After that a match only counts
    when it starts a line, so delimiter-like bytes inside a body do not
    split it.

    Segments without a header/body separator are skipped. Parts whose headers
    do not declare an ``image/`` content type are dropped. An empty result is
    not an error here; the caller decides.

    Raises:
        MalformedMultipart: if ``boundary`` is empty.
    """
    if not boundary:
        raise MalformedMultipart("Boundary token is empty", "empty_boundary")

    delimiter = b"--" + boundary
    parts: list[Part] = []

    state = _State.PREAMBLE
    position = 0
    while state is not _State.DONE:
        if state is _State.PREAMBLE:
            match = search(buffer, delimiter, position)
        else:
            match = _next_delimiter(buffer, delimiter, position, search)
        if match == -1:
            state = _State.DONE
            continue

        if state is _State.IN_PART:
            part = _split_segment(buffer[position:match])
            if part is None:
                logger.debug("Skipping multipart segment at offset %d: no header separator", position)
            elif IMAGE_CONTENT_TYPE_MARKER in part.header_text:
                parts.append(part)

        state = _State.IN_PART
        position = match + len(delimiter)

    return parts
