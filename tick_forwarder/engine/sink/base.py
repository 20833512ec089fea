"""Sink Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable

from ..records import OutputRecord


class DeliveryOutcome(str, Enum):
    """Result of handing one record to a sink."""

    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


class BaseSink(ABC):
    """Uniform sink contract letting the exporter drive file or socket output."""

    #: Whether non-trade records should be encoded as UNKNOWN rather than dropped.
    passthrough_unknown: bool = False

    def begin_batch(self) -> bool:
        """Prepare for a batch; False means nothing can be delivered this poll."""

        return True

    @abstractmethod
    def deliver(self, record: OutputRecord) -> DeliveryOutcome:
        """Hand a single record to the destination."""

    def deliver_many(self, records: Iterable[OutputRecord]) -> list[DeliveryOutcome]:
        outcomes: list[DeliveryOutcome] = []
        for record in records:
            outcome = self.deliver(record)
            outcomes.append(outcome)
            if outcome is DeliveryOutcome.FAILED:
                break
        return outcomes

    def end_batch(self) -> None:
        """Release per-batch resources."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def describe(self) -> str:
        return self.__class__.__name__


__all__ = ["BaseSink", "DeliveryOutcome"]
