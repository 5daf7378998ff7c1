"""Failure taxonomy for a lectern run.

Every fatal error carries the stage it happened in (load, build, persist)
so the CLI can report which part of the run stopped and on what item.
"""

from __future__ import annotations


class LecternError(Exception):
    stage = "run"

    def describe(self) -> str:
        return f"[{self.stage}] {self}"


# ── Load ────────────────────────────────────────────────────────────


class LoadError(LecternError):
    """Malformed configuration or stopword tables.  Raised before indexing."""

    stage = "load"

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        if self.problems:
            message = message + "\n" + "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(message)


class ConfigError(LoadError):
    pass


class StopwordLoadError(LoadError):
    pass


# ── Build ───────────────────────────────────────────────────────────


class CorpusParseError(LecternError):
    stage = "build"

    def __init__(self, document_set_id: str, reason: str):
        self.document_set_id = document_set_id
        self.reason = reason
        super().__init__(f"cannot parse document set '{document_set_id}': {reason}")


# ── Persist ─────────────────────────────────────────────────────────


class StoreError(LecternError):
    """A failed store write, classified as transient (timeout/busy) or not."""

    stage = "persist"

    def __init__(self, message: str, transient: bool = False):
        self.transient = transient
        super().__init__(message)


class PersistError(LecternError):
    stage = "persist"

    def __init__(
        self,
        collection: str,
        batch_number: int,
        total_batches: int,
        attempts: int,
        cause: Exception,
    ):
        self.collection = collection
        self.batch_number = batch_number
        self.total_batches = total_batches
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"batch {batch_number} of {total_batches} for '{collection}' failed "
            f"after {attempts} attempt(s): {cause}"
        )
