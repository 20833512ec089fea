"""Shared fixtures for engine, config and CLI tests."""

from __future__ import annotations

import errno
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from tick_forwarder.config import ConfigLocator, ConfigRepository
from tick_forwarder.engine import TickRecord, TickType
from tick_forwarder.engine.timestamps import UNIX_EPOCH_SERIAL_DAYS


@pytest.fixture(autouse=True)
def forwarder_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config and log files inside the test's temporary directory."""

    monkeypatch.setenv("TICK_FORWARDER_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def make_tick() -> Callable[..., TickRecord]:
    def _builder(seq: int, tick_type: TickType = TickType.BID, **overrides: Any) -> TickRecord:
        base: dict[str, Any] = {
            "type": tick_type,
            "feed_sequence": seq,
            "timestamp": UNIX_EPOCH_SERIAL_DAYS + seq / 86400.0,
            "price": 100.0 + seq,
            "volume": seq,
            "milliseconds": 0,
        }
        base.update(overrides)
        return TickRecord(**base)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    return ConfigRepository(ConfigLocator(project_root=tmp_path))


class FakeSocket:
    """Scriptable stand-in for a non-blocking TCP socket."""

    def __init__(
        self,
        connect_results: Iterable[int] = (0,),
        send_results: Iterable[BaseException | int | None] = (),
    ) -> None:
        self.connect_results = list(connect_results)
        self.send_results = list(send_results)
        self.connect_calls = 0
        self.address: tuple[str, int] | None = None
        self.sent: list[bytes] = []
        self.closed = False

    def connect_ex(self, address: tuple[str, int]) -> int:
        self.connect_calls += 1
        self.address = address
        if self.connect_results:
            return self.connect_results.pop(0)
        return errno.EISCONN

    def send(self, data: bytes) -> int:
        outcome = self.send_results.pop(0) if self.send_results else None
        if isinstance(outcome, BaseException):
            raise outcome
        self.sent.append(data)
        return len(data) if outcome is None else outcome

    def close(self) -> None:
        self.closed = True

    @property
    def lines(self) -> list[str]:
        return [chunk.decode("utf-8") for chunk in self.sent]


class FakeSocketFactory:
    """Hand out queued FakeSockets and remember every socket created."""

    def __init__(self, *sockets: FakeSocket) -> None:
        self.queue = list(sockets)
        self.created: list[FakeSocket] = []

    def __call__(self) -> FakeSocket:
        sock = self.queue.pop(0) if self.queue else FakeSocket()
        self.created.append(sock)
        return sock


@pytest.fixture
def fake_socket_factory() -> Callable[..., FakeSocketFactory]:
    return FakeSocketFactory


@pytest.fixture
def fake_socket() -> type[FakeSocket]:
    return FakeSocket
