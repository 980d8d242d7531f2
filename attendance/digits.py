"""
attendance.digits — OCR confusable-glyph normalisation.

Small screenshot digits are frequently misread as look-alike letters or
punctuation.  :data:`CONFUSABLE_DIGITS` maps those glyphs back to the
digit they were most likely meant to be.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

CONFUSABLE_DIGITS: Mapping[str, str] = MappingProxyType({
    "O": "0",
    "o": "0",
    "Q": "0",
    "D": "0",
    "I": "1",
    "l": "1",
    "|": "1",
    "!": "1",
    "S": "5",
    "s": "5",
    "B": "8",
    "Z": "2",
})

# Regex character class matching a real digit or any confusable glyph.
DIGIT_LIKE_CLASS = "[0-9" + re.escape("".join(CONFUSABLE_DIGITS)) + "]"


def normalize_digits(value: str) -> str:
    """Replace every confusable glyph in *value* with its digit.

    Characters absent from the table (including real digits) pass
    through unchanged.
    """
    return "".join(CONFUSABLE_DIGITS.get(ch, ch) for ch in value)
