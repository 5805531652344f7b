"""
Parser for the vision model's free-text reply.

The model is asked to answer in the form

    원본 텍스트: <text read from the image>
    번역: <translation>

or to reply "텍스트 없음" when the image has no text. Replies do not always
follow that shape, so parsing is lenient: labels are matched anywhere in a
line, in Korean or English, and a reply with no recognizable labels is
returned whole as both the original and the translation.
"""

import logging

from app.models.translation import TranslationResult
from app.services.script_classifier import classify

logger = logging.getLogger(__name__)

ORIGINAL = "original_text"
TRANSLATION = "translated_text"

# Exact replies meaning "no text in the image"
NO_TEXT_MARKERS = {"텍스트 없음", "No text"}
# Substring meaning the same, matched case-insensitively
NO_TEXT_PHRASE = "no text found"

# Tested in order on every line; the first label found on a line decides the field.
FIELD_LABELS: list[tuple[str, str]] = [
    ("원본 텍스트:", ORIGINAL),
    ("Original text:", ORIGINAL),
    ("번역:", TRANSLATION),
    ("Translation:", TRANSLATION),
]


def is_no_text_response(response_text: str) -> bool:
    trimmed = response_text.strip()
    return trimmed in NO_TEXT_MARKERS or NO_TEXT_PHRASE in response_text.lower()


def _value_after_first_colon(line: str) -> str:
    # Colons inside the value are kept
    return line.split(":", 1)[1].strip()


def _match_field(line: str) -> str | None:
    for label, field_name in FIELD_LABELS:
        if label in line:
            return field_name
    return None


def parse(response_text: str) -> TranslationResult:
    """
    Turn a vision reply into a TranslationResult.

    A "no text" reply gives has_text=False with empty fields. Otherwise each
    labelled line overwrites its field, so the last occurrence wins. If no
    field was filled, the whole reply is used for both fields.
    """
    if is_no_text_response(response_text):
        return TranslationResult(
            original_text="",
            translated_text="",
            source_label=classify(""),
            target_label=classify("").opposite,
            has_text=False,
        )

    fields = {ORIGINAL: "", TRANSLATION: ""}
    for line in response_text.split("\n"):
        field_name = _match_field(line)
        if field_name is not None:
            fields[field_name] = _value_after_first_colon(line)

    if not fields[ORIGINAL] and not fields[TRANSLATION]:
        logger.warning(
            "Vision reply had no recognizable labels; returning it whole (%d chars)",
            len(response_text),
        )
        fields[ORIGINAL] = response_text
        fields[TRANSLATION] = response_text

    source_label = classify(fields[ORIGINAL])
    return TranslationResult(
        original_text=fields[ORIGINAL],
        translated_text=fields[TRANSLATION],
        source_label=source_label,
        target_label=source_label.opposite,
        has_text=True,
    )
