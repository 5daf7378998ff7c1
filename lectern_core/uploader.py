"""Uploads of the raw corpus and the version catalog.

Both go through the same batched persistence engine as the search index.

- catalog:      <versions>/<abbreviation>  = {language, name}
- translations: <translations>/<set id>/books/<abbrev> = {name, chapters}
                <translations>/<set id>  = {name, lastUpdated}

A translation's header document is written after all of its books, so a
header only exists for a translation whose books all landed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from lectern_core.corpus import Book, CorpusUnit, VersionEntry
from lectern_core.persistence import PersistSummary, persist
from lectern_core.store import DocumentStore, WriteRecord

logger = logging.getLogger(__name__)


def catalog_records(entries: Iterable[VersionEntry]) -> list[WriteRecord]:
    return [
        WriteRecord(key=e.abbreviation, value={"language": e.language, "name": e.name})
        for e in entries
    ]


def book_record(book: Book) -> WriteRecord:
    chapters = {str(num): verses for num, verses in enumerate(book.chapters, 1)}
    return WriteRecord(key=book.abbrev, value={"name": book.name, "chapters": chapters})


def books_collection(translations_collection: str, document_set_id: str) -> str:
    return f"{translations_collection}/{document_set_id}/books"


def upload_catalog(
    entries: list[VersionEntry],
    store: DocumentStore,
    collection: str = "versions",
    **persist_options,
) -> PersistSummary:
    logger.info("Uploading version catalog: %d versions.", len(entries))
    return persist(catalog_records(entries), store, collection, **persist_options)


def upload_translations(
    units: Iterable[CorpusUnit],
    store: DocumentStore,
    collection: str = "translations",
    now: Callable[[], datetime] | None = None,
    **persist_options,
) -> list[PersistSummary]:
    """Upload every document set's books, then its header document."""
    now = now or (lambda: datetime.now(timezone.utc))
    summaries = []
    for unit in units:
        logger.info("Uploading %s: %d books.", unit.document_set_id, len(unit.books))
        records = [book_record(b) for b in unit.books]
        summaries.append(
            persist(
                records,
                store,
                books_collection(collection, unit.document_set_id),
                **persist_options,
            )
        )
        header = WriteRecord(
            key=unit.document_set_id,
            value={"name": unit.document_set_id, "lastUpdated": now().isoformat()},
        )
        summaries.append(persist([header], store, collection, **persist_options))
    return summaries
