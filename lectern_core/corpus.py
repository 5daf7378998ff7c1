"""Corpus loading: one JSON file per document set, plus the version catalog.

A document set file is a list of books:

    [{"abbrev": "gn", "name": "Genesis", "chapters": [["verse 1", ...], ...]}, ...]

Some sources spell the book title as "book" instead of "name".  Files may
start with a UTF-8 byte-order mark.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from lectern_core.errors import CorpusParseError
from lectern_core.text import strip_bom

logger = logging.getLogger(__name__)

CATALOG_FILENAME = "index.json"


@dataclass
class Book:
    abbrev: str
    name: str
    chapters: list[list[str]] = field(default_factory=list)

    @property
    def verse_count(self) -> int:
        return sum(len(c) for c in self.chapters)


@dataclass
class CorpusUnit:
    document_set_id: str
    books: list[Book]

    @property
    def verse_count(self) -> int:
        return sum(b.verse_count for b in self.books)


@dataclass
class VersionEntry:
    abbreviation: str
    language: str
    name: str


# ── Schema ──────────────────────────────────────────────────────────

def _book_errors(i: int, book) -> list[str]:
    if not isinstance(book, dict):
        return [f"book #{i} must be an object."]

    errors: list[str] = []
    abbrev = book.get("abbrev")
    if not isinstance(abbrev, str) or not abbrev:
        errors.append(f"book #{i}: 'abbrev' is required and must be a non-empty string.")

    for key in ("name", "book"):
        if key in book and not isinstance(book[key], str):
            errors.append(f"book #{i}: '{key}' must be a string.")

    chapters = book.get("chapters")
    if not isinstance(chapters, list):
        errors.append(f"book #{i}: 'chapters' is required and must be a list.")
        return errors
    for c, verses in enumerate(chapters, 1):
        if not isinstance(verses, list) or not all(isinstance(v, str) for v in verses):
            errors.append(f"book #{i} chapter {c}: must be a list of verse strings.")
    return errors


def parse_corpus_unit(document_set_id: str, content: str) -> CorpusUnit:
    """Parse the text of one document set file into books."""
    try:
        data = json.loads(strip_bom(content))
    except json.JSONDecodeError as e:
        raise CorpusParseError(document_set_id, f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorpusParseError(document_set_id, "top level must be a list of books")

    errors: list[str] = []
    for i, book in enumerate(data, 1):
        errors.extend(_book_errors(i, book))
    if errors:
        shown = "; ".join(errors[:5])
        more = f" (+{len(errors) - 5} more)" if len(errors) > 5 else ""
        raise CorpusParseError(document_set_id, shown + more)

    books = [
        Book(
            abbrev=b["abbrev"],
            name=b.get("name") or b.get("book") or "",
            chapters=b["chapters"],
        )
        for b in data
    ]
    return CorpusUnit(document_set_id=document_set_id, books=books)


def load_corpus_unit(path: str | Path) -> CorpusUnit:
    path = Path(path)
    document_set_id = path.stem
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusParseError(document_set_id, f"cannot read {path}: {e}") from e
    return parse_corpus_unit(document_set_id, content)


# ── Discovery ───────────────────────────────────────────────────────

def discover_corpus_files(corpus_dir: str | Path) -> list[Path]:
    """All document set files in a directory, in filename order.

    The catalog file and anything that is not JSON are skipped.
    """
    return sorted(
        p
        for p in Path(corpus_dir).glob("*.json")
        if p.is_file() and p.name != CATALOG_FILENAME
    )


def load_corpus(corpus_dir: str | Path) -> list[CorpusUnit]:
    units = []
    for path in discover_corpus_files(corpus_dir):
        unit = load_corpus_unit(path)
        logger.debug("Loaded %s: %d books, %d verses.", unit.document_set_id, len(unit.books), unit.verse_count)
        units.append(unit)
    return units


# ── Version catalog ─────────────────────────────────────────────────

def parse_catalog(content: str) -> list[VersionEntry]:
    """Flatten ``[{language, versions: [{abbreviation, name}]}]`` into entries."""
    try:
        data = json.loads(strip_bom(content))
    except json.JSONDecodeError as e:
        raise CorpusParseError(CATALOG_FILENAME, f"invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise CorpusParseError(CATALOG_FILENAME, "top level must be a list of languages")

    entries: list[VersionEntry] = []
    for i, lang in enumerate(data, 1):
        if not isinstance(lang, dict) or not isinstance(lang.get("language"), str):
            raise CorpusParseError(CATALOG_FILENAME, f"entry #{i} needs a string 'language'")
        versions = lang.get("versions")
        if not isinstance(versions, list):
            raise CorpusParseError(CATALOG_FILENAME, f"entry #{i} needs a 'versions' list")
        for v in versions:
            if (
                not isinstance(v, dict)
                or not isinstance(v.get("abbreviation"), str)
                or not v["abbreviation"]
                or not isinstance(v.get("name"), str)
            ):
                raise CorpusParseError(
                    CATALOG_FILENAME,
                    f"entry #{i} ({lang['language']}): each version needs 'abbreviation' and 'name'",
                )
            entries.append(VersionEntry(v["abbreviation"], lang["language"], v["name"]))
    return entries


def load_catalog(corpus_dir: str | Path) -> list[VersionEntry] | None:
    """Read the catalog beside the corpus.  Returns None when there is none."""
    path = Path(corpus_dir) / CATALOG_FILENAME
    if not path.exists():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusParseError(CATALOG_FILENAME, f"cannot read {path}: {e}") from e
    return parse_catalog(content)
