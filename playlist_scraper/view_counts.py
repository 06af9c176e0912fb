"""
View count parsing for YouTube playlist rows ("1.5M views" -> 1500000)
"""

from __future__ import annotations

import re
from typing import Optional

VIEWS_PATTERN = re.compile(r"^([\d,.]+[KMB]?)\s*views?$", re.IGNORECASE)

MAGNITUDES = {
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}

_LEADING_DIGITS = re.compile(r"^\d+")


def normalize_views(text: Optional[str]) -> int:
    """Convert a human-readable view count into an integer.

    Anything that does not look like ``<number>[K|M|B] view(s)`` counts as 0,
    including "No views" and empty strings. Without a suffix the fraction is
    dropped ("1.5 views" -> 1).
    """
    if not text:
        return 0

    match = VIEWS_PATTERN.match(text.strip())
    if not match:
        return 0

    view_string = match.group(1).upper().replace(",", "")
    suffix = view_string[-1]

    if suffix in MAGNITUDES:
        try:
            return int(float(view_string[:-1]) * MAGNITUDES[suffix])
        except ValueError:
            return 0

    digits = _LEADING_DIGITS.match(view_string)
    return int(digits.group(0)) if digits else 0
