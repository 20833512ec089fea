from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tick_forwarder.config import (
    FeedConfig,
    FileSinkConfig,
    ForwarderConfig,
    PollConfig,
    SinkKind,
    SocketSinkConfig,
)


def test_defaults_are_inert() -> None:
    config = ForwarderConfig()
    assert config.enabled is False
    assert config.sink is SinkKind.FILE
    assert config.file.max_size_kb == 1000
    assert config.socket.port == 9999
    assert config.socket.host == "127.0.0.1"
    assert config.log_every == 100


def test_file_sink_size_validation() -> None:
    assert FileSinkConfig(max_size_kb=0).max_size_bytes == 0
    assert FileSinkConfig(max_size_kb=2).max_size_bytes == 2048
    with pytest.raises(ValidationError):
        FileSinkConfig(max_size_kb=-1)


@pytest.mark.parametrize("port", [0, 70000])
def test_socket_port_validation(port: int) -> None:
    with pytest.raises(ValidationError):
        SocketSinkConfig(port=port)


def test_poll_interval_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        PollConfig(interval_seconds=0)


def test_log_every_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ForwarderConfig(log_every=0)


def test_sink_kind_from_string() -> None:
    assert ForwarderConfig.model_validate({"sink": "socket"}).sink is SinkKind.SOCKET


def test_feed_path_blank_becomes_none() -> None:
    assert FeedConfig(path="").path is None


def test_resolve_paths_anchors_relative_paths(tmp_path: Path) -> None:
    config = ForwarderConfig(feed=FeedConfig(path="feeds/es.jsonl"))
    resolved = config.resolve_paths(tmp_path)
    assert resolved.file.path == (tmp_path / "data/outputs/ticks.jsonl").resolve()
    assert resolved.feed.path == (tmp_path / "feeds/es.jsonl").resolve()
    assert config.feed.path == Path("feeds/es.jsonl")

    absolute = ForwarderConfig(file=FileSinkConfig(path=tmp_path / "x.jsonl"))
    assert absolute.resolve_paths(Path("/elsewhere")).file.path == tmp_path / "x.jsonl"
