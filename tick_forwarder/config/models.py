"""Pydantic models describing how the tick forwarder is wired."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

LOOPBACK_HOST = "127.0.0.1"


class SinkKind(str, Enum):
    """Output destinations the exporter can drive."""

    FILE = "file"
    SOCKET = "socket"


class FileSinkConfig(BaseModel):
    """Append-only JSON lines file with an optional size budget."""

    path: Path = Field(default=Path("data/outputs/ticks.jsonl"))
    max_size_kb: int = Field(default=1000, description="0 disables rotation.")

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("max_size_kb")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_size_kb must be >= 0")
        return value

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_kb * 1024


class SocketSinkConfig(BaseModel):
    """TCP client settings; the peer always lives on the loopback interface."""

    port: int = 9999

    @field_validator("port")
    @classmethod
    def _valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("port must be within 1..65535")
        return value

    @property
    def host(self) -> str:
        return LOOPBACK_HOST


class FeedConfig(BaseModel):
    """Replay file used as the market-data feed when running from the CLI."""

    path: Path | None = None
    symbol: str = ""

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_optional_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)


class PollConfig(BaseModel):
    """Cadence of the host polling loop."""

    interval_seconds: float = 0.25

    @field_validator("interval_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("interval_seconds must be > 0")
        return float(value)


class ForwarderConfig(BaseModel):
    """Top level configuration for one export session."""

    enabled: bool = False
    sink: SinkKind = SinkKind.FILE
    file: FileSinkConfig = Field(default_factory=FileSinkConfig)
    socket: SocketSinkConfig = Field(default_factory=SocketSinkConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    poll: PollConfig = Field(default_factory=PollConfig)
    log_every: int = 100

    @field_validator("log_every")
    @classmethod
    def _log_every_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("log_every must be >= 1")
        return value

    def resolve_paths(self, base_dir: Path) -> "ForwarderConfig":
        """Return a copy whose relative file/feed paths are anchored at base_dir."""

        file_path = self.file.path
        if not file_path.is_absolute():
            file_path = (base_dir / file_path).resolve()
        feed_path = self.feed.path
        if feed_path is not None and not feed_path.is_absolute():
            feed_path = (base_dir / feed_path).resolve()
        return self.model_copy(
            update={
                "file": self.file.model_copy(update={"path": file_path}),
                "feed": self.feed.model_copy(update={"path": feed_path}),
            }
        )


__all__ = [
    "FeedConfig",
    "FileSinkConfig",
    "ForwarderConfig",
    "LOOPBACK_HOST",
    "PollConfig",
    "SinkKind",
    "SocketSinkConfig",
]
