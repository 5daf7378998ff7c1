"""Stopword registry: per-locale word lists loaded once, frozen for lookup."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from lectern_core.errors import StopwordLoadError

logger = logging.getLogger(__name__)

EMPTY: frozenset[str] = frozenset()


def locale_for(document_set_id: str) -> str:
    """'en_kjv' -> 'en'."""
    return document_set_id[:2]


def validate_stopword_table(table) -> list[str]:
    """Check the shape of a locale -> words table.  Returns list of error strings."""
    if not isinstance(table, dict):
        return [f"stopword table must be an object keyed by locale, got {type(table).__name__}."]

    errors: list[str] = []
    for locale, words in table.items():
        if not isinstance(locale, str) or len(locale) != 2 or not locale.isalpha():
            errors.append(f"locale key '{locale}' must be a 2-letter code.")
        if isinstance(words, str) or not isinstance(words, Sequence):
            errors.append(f"'{locale}' must map to a list of words.")
            continue
        bad = [w for w in words if not isinstance(w, str)]
        if bad:
            errors.append(f"'{locale}' contains non-string entries: {bad[:5]}.")
    return errors


def load_stopword_table(path: str) -> dict[str, list[str]]:
    """Read a JSON stopword table from disk and validate its shape."""
    try:
        table = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    except FileNotFoundError as e:
        raise StopwordLoadError(f"Stopword file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StopwordLoadError(f"Cannot read stopword file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StopwordLoadError(f"Invalid JSON in stopword file {path}: {e}") from e

    errors = validate_stopword_table(table)
    if errors:
        raise StopwordLoadError(f"Malformed stopword table {path}", errors)
    return table


def build_stopword_sets(tables: Mapping[str, Sequence[str]]) -> dict[str, frozenset[str]]:
    """Convert each locale's word list into a frozen set of lowercase words."""
    errors = validate_stopword_table(dict(tables))
    if errors:
        raise StopwordLoadError("Malformed stopword table", errors)

    logger.info("Loading stopwords...")
    sets: dict[str, frozenset[str]] = {}
    for locale, words in tables.items():
        sets[locale] = frozenset(w.lower() for w in words)
        logger.info("Stopwords for '%s' loaded: %d words.", locale, len(sets[locale]))
    return sets


def stopwords_for(sets: Mapping[str, frozenset[str]], locale: str) -> frozenset[str]:
    return sets.get(locale, EMPTY)
