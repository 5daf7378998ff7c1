"""Shared text normalization for the index builder.

A verse becomes a set of tokens: lowercase, letters only (ASCII plus the
à-ú accented range), longer than two characters, not a stopword.
"""

from __future__ import annotations

import re

BOM = "\ufeff"

_NON_LETTER = re.compile(r"[^a-zà-ú\s]")


def strip_bom(text: str) -> str:
    """Drop a leading byte-order mark.  Applied once per file, never per verse."""
    return text[1:] if text.startswith(BOM) else text


def normalize(
    raw_text: str,
    stopwords: frozenset[str] | set[str] = frozenset(),
    separator: str = "",
) -> set[str]:
    """Lowercase → strip non-letters → split on whitespace → dedup → filter.

    With the default empty ``separator`` the stripped characters simply
    vanish, so "end.Start" becomes the single word "endstart".  Pass
    ``separator=" "`` to split words at punctuation instead.
    """
    cleaned = _NON_LETTER.sub(separator, raw_text.lower())
    words = set(cleaned.split())
    return {w for w in words if len(w) > 2 and w not in stopwords}
