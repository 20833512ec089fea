"""Exporter wiring together feed polling, cursor, encoder and sink."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import structlog

from .config import ForwarderConfig, SinkKind
from .engine import (
    BaseSink,
    Cursor,
    DeliveryOutcome,
    FileSink,
    IndexCursor,
    InMemoryFeed,
    RecordEncoder,
    ReplayFeed,
    SequenceCursor,
    SocketSink,
    TickFeed,
    TickRecord,
)
from .logging_conf import component_logger


@dataclass(slots=True)
class PollSummary:
    """Counters describing a single exporter invocation."""

    snapshot_size: int = 0
    examined: int = 0
    filtered: int = 0
    delivered: int = 0
    skipped: int = 0
    failed: int = 0
    batch_opened: bool = False
    sink_state: str = "-"

    def as_dict(self) -> dict[str, int | bool | str]:
        return {
            "snapshot_size": self.snapshot_size,
            "examined": self.examined,
            "filtered": self.filtered,
            "delivered": self.delivered,
            "skipped": self.skipped,
            "failed": self.failed,
            "batch_opened": self.batch_opened,
            "sink_state": self.sink_state,
        }


class Exporter:
    """Long-lived export session driven by repeated ``poll`` calls.

    The host invokes ``poll`` on its own cadence and never concurrently, so
    cursor, encoder counter and sink state need no locking.
    """

    def __init__(
        self,
        feed: TickFeed,
        sink: BaseSink,
        cursor: Cursor,
        encoder: RecordEncoder | None = None,
        enabled: bool = True,
        log_every: int = 100,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.feed = feed
        self.sink = sink
        self.cursor = cursor
        self.encoder = encoder or RecordEncoder(feed.symbol, passthrough_unknown=sink.passthrough_unknown)
        self.enabled = enabled
        self.log_every = log_every
        self.logger = logger or component_logger("exporter")
        self.total_delivered = 0
        self._since_last_log = 0
        self._stalled = False

    def poll(self) -> PollSummary:
        summary = PollSummary()
        if not self.enabled:
            return summary
        try:
            snapshot = self.feed.snapshot()
        except OSError as exc:
            self.logger.error("feed_snapshot_failed", error=str(exc))
            return summary
        summary.snapshot_size = len(snapshot)
        self._check_shrink(snapshot)
        if not snapshot:
            summary.sink_state = self._sink_state()
            return summary

        # Lazy: a sequence cursor only moves while records are actually pulled.
        pending = self.cursor.select(snapshot)
        if self.sink.begin_batch():
            summary.batch_opened = True
            try:
                for record in pending:
                    summary.examined += 1
                    if not self.encoder.accepts(record):
                        summary.filtered += 1
                        continue
                    outcome = self.sink.deliver(self.encoder.encode(record))
                    if outcome is DeliveryOutcome.DELIVERED:
                        summary.delivered += 1
                    elif outcome is DeliveryOutcome.SKIPPED:
                        summary.skipped += 1
                    else:
                        summary.failed += 1
                        break
            finally:
                self.sink.end_batch()
        self.cursor.commit(snapshot)

        self._record_progress(summary.delivered)
        summary.sink_state = self._sink_state()
        return summary

    def close(self) -> None:
        self.sink.close()

    def _record_progress(self, delivered: int) -> None:
        self.total_delivered += delivered
        self._since_last_log += delivered
        if self._since_last_log >= self.log_every:
            self.logger.info(
                "ticks_exported",
                exported=self._since_last_log,
                total=self.encoder.sequence,
                sink=self.sink.describe(),
            )
            self._since_last_log = 0

    def _check_shrink(self, snapshot: Sequence[TickRecord]) -> None:
        if not isinstance(self.cursor, IndexCursor):
            return
        watermark = self.cursor.last_processed_index
        if len(snapshot) >= watermark:
            self._stalled = False
        elif not self._stalled:
            # Nothing is forwarded until the snapshot grows past the watermark again.
            self._stalled = True
            self.logger.warning("feed_snapshot_shrank", size=len(snapshot), watermark=watermark)

    def _sink_state(self) -> str:
        state = getattr(self.sink, "state", None)
        return state.value if state is not None else "-"


class ExporterFactory:
    """Build an exporter whose cursor discipline matches the configured sink."""

    @staticmethod
    def build(config: ForwarderConfig, feed: TickFeed | None = None) -> Exporter:
        feed = feed or ExporterFactory.build_feed(config)
        sink = ExporterFactory.build_sink(config)
        cursor: Cursor = SequenceCursor() if config.sink is SinkKind.SOCKET else IndexCursor()
        symbol = config.feed.symbol or feed.symbol
        return Exporter(
            feed=feed,
            sink=sink,
            cursor=cursor,
            encoder=RecordEncoder(symbol, passthrough_unknown=sink.passthrough_unknown),
            enabled=config.enabled,
            log_every=config.log_every,
        )

    @staticmethod
    def build_sink(config: ForwarderConfig) -> BaseSink:
        if config.sink is SinkKind.FILE:
            return FileSink(config.file.path, max_size_kb=config.file.max_size_kb)
        if config.sink is SinkKind.SOCKET:
            return SocketSink(config.socket.port, host=config.socket.host)
        raise ValueError(f"Unsupported sink: {config.sink}")

    @staticmethod
    def build_feed(config: ForwarderConfig) -> TickFeed:
        if config.feed.path is not None:
            return ReplayFeed(config.feed.path, config.feed.symbol)
        return InMemoryFeed(config.feed.symbol)


__all__ = ["Exporter", "ExporterFactory", "PollSummary"]
