"""Batched persistence: commit write records to a document store in
bounded, paced, retried batches.

Each batch moves through

    PENDING → COMMITTING → COMMITTED
                         → RETRYING → COMMITTING ...
                         → FAILED

A single commit attempt returns a ``CommitOutcome`` instead of raising;
the loop in ``persist()`` decides what to do with it.  Transient
failures are retried in place with a fixed delay, up to ``max_attempts``
attempts in total, never more than three.  Anything else, or running out
of attempts, stops the run: later batches are never written.  Writes
replace whole documents by key, so a failed run is fixed by running it
again.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from lectern_core.errors import PersistError, StoreError
from lectern_core.store import DocumentStore, WriteRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100
DEFAULT_PACING_SECONDS = 0.3
DEFAULT_RETRY_DELAY_SECONDS = 5.0
MAX_ATTEMPTS = 3


class BatchState(str, Enum):
    PENDING = "pending"
    COMMITTING = "committing"
    RETRYING = "retrying"
    COMMITTED = "committed"
    FAILED = "failed"


# ── Commit outcomes ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Committed:
    pass


@dataclass(frozen=True)
class RetryableFailure:
    error: StoreError


@dataclass(frozen=True)
class FatalFailure:
    error: Exception


CommitOutcome = Union[Committed, RetryableFailure, FatalFailure]


@dataclass
class BatchReport:
    number: int
    size: int
    state: BatchState = BatchState.PENDING
    attempts: int = 0
    history: list[BatchState] = field(default_factory=lambda: [BatchState.PENDING])

    def move(self, state: BatchState) -> None:
        self.state = state
        self.history.append(state)


@dataclass
class PersistSummary:
    collection: str
    records: int
    batches: list[BatchReport] = field(default_factory=list)

    @property
    def total_attempts(self) -> int:
        return sum(b.attempts for b in self.batches)

    @property
    def retries(self) -> int:
        return self.total_attempts - len(self.batches)


# ── Partitioning ────────────────────────────────────────────────────

def partition(records: Sequence[WriteRecord], batch_size: int) -> Iterator[list[WriteRecord]]:
    """Consecutive slices of at most ``batch_size`` records; the last may be short."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(records), batch_size):
        yield list(records[start : start + batch_size])


def batch_count(total: int, batch_size: int) -> int:
    return -(-total // batch_size)


# ── Single attempt ──────────────────────────────────────────────────

def commit_batch(
    store: DocumentStore,
    collection: str,
    batch: list[WriteRecord],
) -> CommitOutcome:
    """Try one atomic write of ``batch`` and classify the result.

    Only a ``StoreError`` marked transient is retryable; any other failure
    raised by the backend is fatal for the batch.
    """
    try:
        store.write_batch(collection, batch)
    except StoreError as e:
        if e.transient:
            return RetryableFailure(e)
        return FatalFailure(e)
    except Exception as e:
        return FatalFailure(e)
    return Committed()


# ── Run ─────────────────────────────────────────────────────────────

def persist(
    records: Sequence[WriteRecord],
    store: DocumentStore,
    collection: str,
    batch_size: int = DEFAULT_BATCH_SIZE,
    pacing_seconds: float = DEFAULT_PACING_SECONDS,
    retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    max_attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> PersistSummary:
    """Write ``records`` to ``collection`` batch by batch.

    Sleeps ``pacing_seconds`` after every committed batch.  Raises
    ``PersistError`` carrying the batch number and batch total on the first
    batch that cannot be committed.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    if not 1 <= max_attempts <= MAX_ATTEMPTS:
        raise ValueError(f"max_attempts must be between 1 and {MAX_ATTEMPTS}, got {max_attempts}")

    total = batch_count(len(records), batch_size)
    summary = PersistSummary(collection=collection, records=len(records))
    logger.info(
        "Writing %d records to '%s' in %d batch(es) of up to %d.",
        len(records),
        collection,
        total,
        batch_size,
    )

    for number, batch in enumerate(partition(records, batch_size), 1):
        report = BatchReport(number=number, size=len(batch))
        summary.batches.append(report)

        while True:
            report.move(BatchState.COMMITTING)
            report.attempts += 1
            outcome = commit_batch(store, collection, batch)

            if isinstance(outcome, Committed):
                report.move(BatchState.COMMITTED)
                logger.info("Batch %d of %d committed.", number, total)
                break

            if isinstance(outcome, RetryableFailure) and report.attempts < max_attempts:
                report.move(BatchState.RETRYING)
                logger.warning(
                    "Batch %d of %d timed out (attempt %d/%d), retrying in %.1fs: %s",
                    number,
                    total,
                    report.attempts,
                    max_attempts,
                    retry_delay_seconds,
                    outcome.error,
                )
                sleep(retry_delay_seconds)
                continue

            report.move(BatchState.FAILED)
            logger.error("Batch %d of %d failed after %d attempt(s).", number, total, report.attempts)
            raise PersistError(
                collection, number, total, report.attempts, outcome.error
            ) from outcome.error

        sleep(pacing_seconds)

    return summary
