"""Feed adapters exposing a pull-based snapshot of time & sales records."""

from __future__ import annotations

import csv
import json
import math
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, Sequence

import structlog

from ..logging_conf import component_logger
from .records import TickRecord, TickType
from .timestamps import split_serial, unix_ms_to_serial


class TickFeed(Protocol):
    """What the exporter needs from a market-data feed."""

    symbol: str

    def snapshot(self) -> Sequence[TickRecord]:
        ...


class InMemoryFeed:
    """List backed feed; appending grows the snapshot like a live buffer."""

    def __init__(self, symbol: str, records: Iterable[TickRecord] | None = None) -> None:
        self.symbol = symbol
        self._records: list[TickRecord] = list(records or [])

    def append(self, *records: TickRecord) -> None:
        self._records.extend(records)

    def extend(self, records: Iterable[TickRecord]) -> None:
        self._records.extend(records)

    def snapshot(self) -> Sequence[TickRecord]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)


class ReplayFeed:
    """Re-read a recorded tick file (JSON lines or CSV) on every snapshot.

    Rows carry ``type``, ``seq``, ``price``, ``volume`` and either ``dt``
    (serial date) or ``ts`` (Unix ms); ``ms`` optionally overrides the
    millisecond-of-second. Another process may keep appending to the file.
    """

    def __init__(self, path: Path, symbol: str, logger: structlog.BoundLogger | None = None) -> None:
        self.path = Path(path)
        self.symbol = symbol or self.path.stem
        self.logger = logger or component_logger("replay_feed")

    def snapshot(self) -> Sequence[TickRecord]:
        if not self.path.exists():
            return ()
        records: list[TickRecord] = []
        try:
            for line_no, row in self._rows():
                try:
                    records.append(self._to_record(row))
                except (KeyError, TypeError, ValueError, OverflowError) as exc:
                    self.logger.warning(
                        "replay_row_invalid", path=str(self.path), line=line_no, error=str(exc)
                    )
        except csv.Error as exc:
            # Keep what was read before the malformed row.
            self.logger.error("feed_snapshot_failed", path=str(self.path), error=str(exc))
        return tuple(records)

    def _rows(self) -> Iterator[tuple[int, dict[str, Any]]]:
        with self.path.open("r", encoding="utf-8", errors="replace", newline="") as stream:
            if self.path.suffix == ".csv":
                for line_no, row in enumerate(csv.DictReader(stream), start=2):
                    yield line_no, row
                return
            for line_no, line in enumerate(stream, start=1):
                text = line.strip()
                if not text:
                    continue
                try:
                    payload = json.loads(text)
                except json.JSONDecodeError as exc:
                    self.logger.warning(
                        "replay_row_invalid", path=str(self.path), line=line_no, error=str(exc)
                    )
                    continue
                if not isinstance(payload, dict):
                    self.logger.warning(
                        "replay_row_invalid",
                        path=str(self.path),
                        line=line_no,
                        error="row must be a JSON object",
                    )
                    continue
                yield line_no, payload

    @staticmethod
    def _to_record(row: dict[str, Any]) -> TickRecord:
        if row.get("dt") not in (None, ""):
            serial = float(row["dt"])
        else:
            serial = unix_ms_to_serial(int(row["ts"]))
        if row.get("ms") not in (None, ""):
            milliseconds = int(row["ms"])
        elif row.get("ts") not in (None, ""):
            milliseconds = int(row["ts"]) % 1000
        else:
            milliseconds = split_serial(serial)
        price = float(row["price"])
        if not (math.isfinite(serial) and math.isfinite(price)):
            raise ValueError("timestamp and price must be finite")
        return TickRecord(
            type=TickType.parse(row.get("type")),
            feed_sequence=int(row["seq"]),
            timestamp=serial,
            price=price,
            volume=int(row["volume"]),
            milliseconds=milliseconds,
        )


__all__ = ["InMemoryFeed", "ReplayFeed", "TickFeed"]
