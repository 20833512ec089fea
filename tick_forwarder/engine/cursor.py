"""Watermarks deciding which feed records are new for the active sink."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Sequence

from .records import TickRecord


class Cursor(ABC):
    """Deduplicate overlapping feed snapshots across polls."""

    @abstractmethod
    def select(self, snapshot: Sequence[TickRecord]) -> Iterator[TickRecord]:
        """Yield snapshot records not yet forwarded, in feed order."""

    def commit(self, snapshot: Sequence[TickRecord]) -> None:
        """Finalise the watermark once a pass over ``snapshot`` is done."""


class IndexCursor(Cursor):
    """Count of snapshot records consumed; assumes an append-only snapshot."""

    def __init__(self) -> None:
        self.last_processed_index = 0

    def select(self, snapshot: Sequence[TickRecord]) -> Iterator[TickRecord]:
        for index in range(self.last_processed_index, len(snapshot)):
            yield snapshot[index]

    def commit(self, snapshot: Sequence[TickRecord]) -> None:
        # Advances even when the sink refused the batch: lost records are not retried.
        self.last_processed_index = max(self.last_processed_index, len(snapshot))


class SequenceCursor(Cursor):
    """Feed sequence of the last examined record.

    The first pass only anchors the watermark at the newest buffered record so
    a fresh session does not flood the sink with backlog. Afterwards the
    watermark moves as each record is yielded, filtered or not, so a pass cut
    short by the sink resumes right after the last examined record.
    """

    def __init__(self) -> None:
        self.last_feed_sequence: int | None = None

    @property
    def activated(self) -> bool:
        return self.last_feed_sequence is not None

    def select(self, snapshot: Sequence[TickRecord]) -> Iterator[TickRecord]:
        if not snapshot:
            return
        if self.last_feed_sequence is None:
            self.last_feed_sequence = snapshot[-1].feed_sequence
            return
        for record in snapshot:
            if record.feed_sequence <= self.last_feed_sequence:
                continue
            self.last_feed_sequence = record.feed_sequence
            yield record


__all__ = ["Cursor", "IndexCursor", "SequenceCursor"]
