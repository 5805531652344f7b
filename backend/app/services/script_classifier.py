"""
Script classifier.

Labels text as Hangul or Other from Unicode code-point ranges alone. Used to
pick the translation direction for plain text and to label text read out of
an image.
"""

from app.models.translation import ScriptLabel

# (first, last) code points, inclusive
HANGUL_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x11FF),  # Hangul Jamo
    (0x3130, 0x318F),  # Hangul Compatibility Jamo
    (0xAC00, 0xD7A3),  # Hangul Syllables
)


def _is_hangul(char: str) -> bool:
    code = ord(char)
    return any(first <= code <= last for first, last in HANGUL_RANGES)


def classify(text: str) -> ScriptLabel:
    """Return HANGUL on the first Hangul code point, OTHER otherwise (including "")."""
    for char in text:
        if _is_hangul(char):
            return ScriptLabel.HANGUL
    return ScriptLabel.OTHER
