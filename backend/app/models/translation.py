"""
Pydantic models for text and image translation.
"""

import base64
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class ScriptLabel(str, Enum):
    """Coarse writing-system family of a text span."""
    HANGUL = "hangul"
    OTHER = "other"

    @property
    def language_name(self) -> str:
        """Display name used in API responses and prompts."""
        return "한국어" if self is ScriptLabel.HANGUL else "English"

    @property
    def opposite(self) -> "ScriptLabel":
        return ScriptLabel.OTHER if self is ScriptLabel.HANGUL else ScriptLabel.HANGUL


MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024  # 10 MB

_IMAGE_MEDIA_TYPE = re.compile(r"image/[\w.+-]+", re.ASCII)


class DecodedAttachment(BaseModel):
    """An image recovered from a multipart body, ready to hand downstream."""

    model_config = ConfigDict(frozen=True)

    media_type: str
    content: bytes
    size: int

    @model_validator(mode="after")
    def _check_invariants(self) -> "DecodedAttachment":
        if not _IMAGE_MEDIA_TYPE.fullmatch(self.media_type):
            raise ValueError(f"media_type must be image/<subtype>, got {self.media_type!r}")
        if self.size != len(self.content):
            raise ValueError("size must equal the number of content bytes")
        if self.size > MAX_ATTACHMENT_BYTES:
            raise ValueError(f"size must not exceed {MAX_ATTACHMENT_BYTES} bytes")
        return self

    def to_data_url(self) -> str:
        """Encode as ``data:<media_type>;base64,<payload>`` (RFC 4648 alphabet)."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"


class TranslationResult(BaseModel):
    """Fields recovered from a vision response. Immutable once parsed."""

    model_config = ConfigDict(frozen=True)

    original_text: str = ""
    translated_text: str = ""
    source_label: ScriptLabel = ScriptLabel.OTHER
    target_label: ScriptLabel = ScriptLabel.HANGUL
    has_text: bool = True


class TranslateRequest(BaseModel):
    """Body of POST /api/translate."""
    text: Optional[Any] = None
