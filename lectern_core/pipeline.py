"""End-to-end runs: load → build → persist.

Nothing is written until the whole index has been built, so a corpus
parse error never leaves a half-written index behind.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from lectern_core.config import RunConfig
from lectern_core.corpus import load_catalog, load_corpus
from lectern_core.indexer import build_index
from lectern_core.persistence import persist
from lectern_core.stopwords import build_stopword_sets, load_stopword_table
from lectern_core.store import DocumentStore
from lectern_core.uploader import upload_catalog, upload_translations

logger = logging.getLogger(__name__)


def _persist_options(config: RunConfig, sleep: Callable[[float], None]) -> dict:
    return {
        "batch_size": config.batch_size,
        "pacing_seconds": config.pacing_seconds,
        "retry_delay_seconds": config.retry_delay_seconds,
        "max_attempts": config.max_attempts,
        "sleep": sleep,
    }


def run_index(
    config: RunConfig,
    store: DocumentStore | None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """Build the search index from the corpus and write it to ``store``.

    With ``store=None`` the index is built but not written (dry run).
    Returns a summary dict with counts.
    """
    stopword_sets = build_stopword_sets(load_stopword_table(config.stopwords_path))

    units = load_corpus(config.corpus_dir)
    index = build_index(
        units,
        stopword_sets,
        separator=config.separator,
        workers=config.workers,
    )

    summary = {
        "document_sets": len(units),
        "verses": sum(u.verse_count for u in units),
        "tokens": len(index),
        "postings": index.posting_count,
        "batches": 0,
        "retries": 0,
    }
    if store is None:
        return summary

    result = persist(
        index.to_records(),
        store,
        config.index_collection,
        **_persist_options(config, sleep),
    )
    summary["batches"] = len(result.batches)
    summary["retries"] = result.retries
    return summary


def run_upload(
    config: RunConfig,
    store: DocumentStore,
    sleep: Callable[[float], None] = time.sleep,
) -> dict:
    """Upload the version catalog (if present) and every translation's text."""
    options = _persist_options(config, sleep)

    entries = load_catalog(config.corpus_dir)
    units = load_corpus(config.corpus_dir)

    if entries is None:
        logger.warning("No catalog found in '%s'; skipping version catalog.", config.corpus_dir)
        versions = 0
        results = []
    else:
        results = [upload_catalog(entries, store, config.versions_collection, **options)]
        versions = len(entries)

    results += upload_translations(units, store, config.translations_collection, **options)

    return {
        "versions": versions,
        "translations": len(units),
        "books": sum(len(u.books) for u in units),
        "batches": sum(len(r.batches) for r in results),
    }
