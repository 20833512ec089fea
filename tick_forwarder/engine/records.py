"""Record types flowing through the forwarding engine."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum


class TickType(str, Enum):
    """Time & sales record categories reported by the feed."""

    BID = "BID"
    ASK = "ASK"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: object) -> "TickType":
        text = str(value or "").strip().upper()
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class TickRecord:
    """Single feed record; owned by the feed, read-only for the engine."""

    type: TickType
    feed_sequence: int
    timestamp: float
    price: float
    volume: int
    milliseconds: int = 0


@dataclass(frozen=True, slots=True)
class OutputRecord:
    """Encoded trade ready for a sink."""

    seq: int
    ts: int
    price: float
    volume: int
    side: str
    symbol: str

    def to_line(self) -> str:
        """Render the newline-terminated wire line."""

        return (
            f'{{"seq":{self.seq},"ts":{self.ts},"p":{self.price:.2f},'
            f'"v":{self.volume},"s":"{self.side}","sym":{json.dumps(self.symbol)}}}\n'
        )

    @classmethod
    def from_line(cls, line: str) -> "OutputRecord":
        """Decode a wire line; raises ValueError on malformed input."""

        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid tick line: {line!r}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Tick line must be a JSON object: {line!r}")
        try:
            return cls(
                seq=int(payload["seq"]),
                ts=int(payload["ts"]),
                price=float(payload["p"]),
                volume=int(payload["v"]),
                side=str(payload["s"]),
                symbol=str(payload["sym"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Incomplete tick line: {line!r}") from exc


__all__ = ["OutputRecord", "TickRecord", "TickType"]
