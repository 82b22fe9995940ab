"""
Search query classification.

Decides which lookup source a raw search string is sent to.  The rules
are checked in order and the first match wins:

  1. Three-word address -- the query contains at least two ``.``
     separators (``filled.count.soap``).
  2. UK postcode -- the query matches the postcode shape
     (``SW1A 1AA``, ``sw1a1aa``).
  3. Free-text place -- everything else.

Classification is total: every non-empty query lands in exactly one
branch, with free text as the catch-all.
"""

from __future__ import annotations

import enum
import re

_THREE_WORD_MIN_SEPARATORS = 2

# Outward code (1-2 letters, digit, optional letter/digit), optional
# space, inward code (digit + two letters).
_POSTCODE_PATTERN = re.compile(r"^[A-Z]{1,2}[0-9][A-Z0-9]? ?[0-9][A-Z]{2}$", re.IGNORECASE)


class QueryKind(str, enum.Enum):
    THREE_WORD = "three_word"
    POSTAL_CODE = "postal_code"
    PLACE = "place"


def is_three_word_code(query: str) -> bool:
    return query.count(".") >= _THREE_WORD_MIN_SEPARATORS


def is_postal_code(query: str) -> bool:
    return _POSTCODE_PATTERN.match(query) is not None


def classify(query: str) -> QueryKind:
    """Classify a search query by the source that should resolve it.

    The query is trimmed before matching.  Callers are expected to have
    filtered out empty queries; an empty string classifies as ``PLACE``.
    """
    trimmed = query.strip()
    if is_three_word_code(trimmed):
        return QueryKind.THREE_WORD
    if is_postal_code(trimmed):
        return QueryKind.POSTAL_CODE
    return QueryKind.PLACE
