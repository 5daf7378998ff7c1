"""SQLite document store for lectern.

Documents live in a single table keyed by (collection, key); each write
replaces the whole document.  A batch write is one transaction, so a
batch either lands completely or not at all.  All I/O is synchronous.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Protocol

from lectern_core.errors import StoreError

DEFAULT_DB_PATH = "lectern.db"

_TRANSIENT_MARKERS = ("locked", "busy", "timeout", "timed out")


@dataclass(frozen=True)
class WriteRecord:
    key: str
    value: dict


class DocumentStore(Protocol):
    """The write contract the persistence engine relies on.

    ``write_batch`` must be all-or-nothing and must raise ``StoreError``
    with ``transient=True`` for failures worth retrying.
    """

    def write_batch(self, collection: str, records: list[WriteRecord]) -> None: ...


def classify_sqlite_error(exc: sqlite3.Error) -> StoreError:
    """Map a sqlite error onto the store's transient/fatal split."""
    message = str(exc)
    transient = isinstance(exc, sqlite3.OperationalError) and any(
        marker in message.lower() for marker in _TRANSIENT_MARKERS
    )
    return StoreError(f"{type(exc).__name__}: {message}", transient=transient)


class SqliteDocumentStore:
    def __init__(self, db_path: str = DEFAULT_DB_PATH, timeout: float = 5.0):
        self.db_path = db_path
        try:
            self.conn = sqlite3.connect(db_path, timeout=timeout)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL")
            self._init_tables()
        except sqlite3.Error as e:
            raise StoreError(f"cannot open document store {db_path}: {e}") from e

    # ── Schema ──────────────────────────────────────────────────────

    def _init_tables(self) -> None:
        self.conn.execute(
            """CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                key        TEXT NOT NULL,
                body       TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (collection, key)
            )"""
        )
        self.conn.commit()

    # ── Writes ──────────────────────────────────────────────────────

    def write_batch(self, collection: str, records: list[WriteRecord]) -> None:
        rows = [
            (collection, r.key, json.dumps(r.value, ensure_ascii=False))
            for r in records
        ]
        try:
            with self.conn:
                self.conn.executemany(
                    "INSERT OR REPLACE INTO documents (collection, key, body) VALUES (?, ?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise classify_sqlite_error(e) from e

    # ── Reads ───────────────────────────────────────────────────────

    def get(self, collection: str, key: str) -> dict | None:
        row = self.conn.execute(
            "SELECT body FROM documents WHERE collection = ? AND key = ?",
            (collection, key),
        ).fetchone()
        return json.loads(row["body"]) if row else None

    def keys(self, collection: str) -> list[str]:
        rows = self.conn.execute(
            "SELECT key FROM documents WHERE collection = ? ORDER BY key",
            (collection,),
        ).fetchall()
        return [r["key"] for r in rows]

    def count(self, collection: str) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) AS n FROM documents WHERE collection = ?",
            (collection,),
        ).fetchone()
        return row["n"]

    # ── Utilities ──────────────────────────────────────────────────

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> SqliteDocumentStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
