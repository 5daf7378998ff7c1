"""Indexer: walks document sets verse by verse and accumulates an
inverted index of token -> locations.

Posting-list order is corpus traversal order (document set, book,
chapter, verse).  A parallel build indexes each document set on its own
and merges the partial indexes back in source order, so the result is
identical to a sequential build.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import partial

from lectern_core.corpus import CorpusUnit
from lectern_core.store import WriteRecord
from lectern_core.stopwords import locale_for, stopwords_for
from lectern_core.text import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Location:
    document_set_id: str
    book_abbrev: str
    chapter: int
    verse: int

    def __str__(self) -> str:
        return f"{self.document_set_id}/{self.book_abbrev}/{self.chapter}/{self.verse}"


# ── Inverted index ──────────────────────────────────────────────────

class InvertedIndex:
    """Owned accumulator for token -> ordered list of locations.

    Append-only while building; ``freeze()`` ends the build phase.
    """

    def __init__(self) -> None:
        self._postings: dict[str, list[Location]] = {}
        self._frozen = False

    def add(self, token: str, location: Location) -> None:
        if self._frozen:
            raise RuntimeError("index is frozen; build phase has ended")
        self._postings.setdefault(token, []).append(location)

    def add_verse(self, location: Location, tokens: Iterable[str]) -> None:
        for token in tokens:
            self.add(token, location)

    def merge(self, other: InvertedIndex) -> None:
        """Append ``other``'s posting lists after this index's, token by token."""
        if self._frozen:
            raise RuntimeError("index is frozen; build phase has ended")
        for token, locations in other._postings.items():
            self._postings.setdefault(token, []).extend(locations)

    def freeze(self) -> InvertedIndex:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def postings(self, token: str) -> tuple[Location, ...]:
        return tuple(self._postings.get(token, ()))

    def tokens(self) -> list[str]:
        return list(self._postings)

    @property
    def posting_count(self) -> int:
        return sum(len(p) for p in self._postings.values())

    def __len__(self) -> int:
        return len(self._postings)

    def __contains__(self, token: object) -> bool:
        return token in self._postings

    def __iter__(self) -> Iterator[str]:
        return iter(self._postings)

    def to_records(self) -> list[WriteRecord]:
        """One write record per token, in first-seen order."""
        return [
            WriteRecord(key=token, value={"locations": [str(loc) for loc in locations]})
            for token, locations in self._postings.items()
        ]


# ── Building ────────────────────────────────────────────────────────

def _index_into(
    index: InvertedIndex,
    unit: CorpusUnit,
    stopwords: frozenset[str],
    separator: str,
) -> None:
    for book in unit.books:
        for chapter_num, verses in enumerate(book.chapters, 1):
            for verse_num, verse_text in enumerate(verses, 1):
                location = Location(unit.document_set_id, book.abbrev, chapter_num, verse_num)
                index.add_verse(location, normalize(verse_text, stopwords, separator))


def index_unit(
    unit: CorpusUnit,
    stopwords: frozenset[str] = frozenset(),
    separator: str = "",
) -> InvertedIndex:
    """Build a partial index for a single document set."""
    index = InvertedIndex()
    _index_into(index, unit, stopwords, separator)
    return index


def build_index(
    units: Iterable[CorpusUnit],
    stopword_sets: Mapping[str, frozenset[str]],
    separator: str = "",
    workers: int = 1,
) -> InvertedIndex:
    """Index every document set and return the frozen result.

    Each unit uses the stopwords of the locale named by the first two
    characters of its id; unknown locales get no stopwords.
    """
    units = list(units)
    index = InvertedIndex()
    unit_stopwords = []
    for unit in units:
        locale = locale_for(unit.document_set_id)
        logger.info("Indexing %s (stopwords '%s')", unit.document_set_id, locale)
        unit_stopwords.append(stopwords_for(stopword_sets, locale))

    if workers > 1 and len(units) > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order
            for partial_index in pool.map(
                partial(index_unit, separator=separator), units, unit_stopwords
            ):
                index.merge(partial_index)
    else:
        for unit, stopwords in zip(units, unit_stopwords):
            _index_into(index, unit, stopwords, separator)

    logger.info(
        "In-memory indexing done: %d unique tokens, %d postings.",
        len(index),
        index.posting_count,
    )
    return index.freeze()
