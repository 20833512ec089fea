"""Filter, sequence and serialise trade records."""

from __future__ import annotations

from .records import OutputRecord, TickRecord, TickType
from .timestamps import serial_to_unix_ms

_TRADE_TYPES = frozenset({TickType.BID, TickType.ASK})


class RecordEncoder:
    """Turn feed records into sequenced output records.

    Each sink instance owns one encoder, so ``seq`` starts at 1 per sink and
    never resets. With ``passthrough_unknown`` set, non-trade records are
    encoded with side ``UNKNOWN`` instead of being filtered out (file exports
    keep them, socket exports drop them).
    """

    def __init__(self, symbol: str, passthrough_unknown: bool = False) -> None:
        self.symbol = symbol
        self.passthrough_unknown = passthrough_unknown
        self.sequence = 0

    def accepts(self, record: TickRecord) -> bool:
        return self.passthrough_unknown or record.type in _TRADE_TYPES

    def encode(self, record: TickRecord) -> OutputRecord:
        self.sequence += 1
        return OutputRecord(
            seq=self.sequence,
            ts=serial_to_unix_ms(record.timestamp, record.milliseconds),
            price=float(record.price),
            volume=int(record.volume),
            side=self._side(record.type),
            symbol=self.symbol,
        )

    @staticmethod
    def _side(tick_type: TickType) -> str:
        if tick_type is TickType.ASK:
            return "ASK"
        if tick_type is TickType.BID:
            return "BID"
        return "UNKNOWN"


__all__ = ["RecordEncoder"]
