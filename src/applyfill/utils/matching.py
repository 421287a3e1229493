# ---------- MATCHING PRIMITIVES ----------

"""
Shared text matching helpers.

    normalize_text
    tokenize
    first_match
    clamp
"""

import re
from typing import Iterable, Optional, Sequence, Tuple

from applyfill.config.validation_constants import CONFIDENCE_PRECISION

# An ordered list of (label, phrases) pairs; the first label with a phrase hit wins
PhraseTable = Sequence[Tuple[str, Iterable[str]]]

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """
    Reduce text to lowercase alphanumeric tokens separated by single spaces.

    "Why do you want to work here?" -> "why do you want to work here"

    Applying it twice gives the same result as applying it once.

    Args:
        text: Raw text. None is treated as an empty string.

    Returns:
        str: The normalized text.
    """

    if not text:
        return ""
    lowered = _NON_ALPHANUMERIC.sub("", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def tokenize(text: Optional[str]) -> list[str]:
    """Split normalized text into words."""

    normalized = normalize_text(text)
    return normalized.split(" ") if normalized else []


def first_match(table: PhraseTable, text: Optional[str]) -> Optional[str]:
    """
    Evaluate an ordered phrase table against text.

    Matching is case-insensitive substring matching. Entries are tested in
    table order and the label of the first entry with any phrase contained in
    the text is returned.

    Args:
        table: Ordered (label, phrases) pairs. Phrases must be lowercase.
        text: The text to test.

    Returns:
        Optional[str]: The winning label, or None if nothing matched.
    """

    if not text:
        return None
    haystack = text.lower()
    for label, phrases in table:
        if any(phrase in haystack for phrase in phrases):
            return label
    return None


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Bound a confidence value to [minimum, maximum] at fixed precision."""

    return round(min(max(value, minimum), maximum), CONFIDENCE_PRECISION)
