from __future__ import annotations

from unittest.mock import MagicMock

from tick_forwarder.engine import OutputRecord, TickFileTailer


def _line(seq: int) -> str:
    return OutputRecord(seq=seq, ts=seq, price=1.0, volume=1, side="BID", symbol="ES").to_line()


def test_tailer_reads_only_new_lines(tmp_path) -> None:
    path = tmp_path / "ticks.jsonl"
    path.write_text(_line(1), encoding="utf-8")
    tailer = TickFileTailer(path, logger=MagicMock())
    assert tailer.read_new() == []

    with path.open("a", encoding="utf-8") as stream:
        stream.write(_line(2) + _line(3))
    assert [r.seq for r in tailer.read_new()] == [2, 3]
    assert tailer.read_new() == []


def test_tailer_waits_for_complete_line(tmp_path) -> None:
    path = tmp_path / "ticks.jsonl"
    full = _line(1)
    path.write_text(full[:10], encoding="utf-8")
    tailer = TickFileTailer(path, from_start=True, logger=MagicMock())
    assert tailer.read_new() == []

    path.write_text(full, encoding="utf-8")
    assert [r.seq for r in tailer.read_new()] == [1]


def test_tailer_detects_rotation_and_gaps(tmp_path) -> None:
    path = tmp_path / "ticks.jsonl"
    path.write_text(_line(1) + _line(2) + _line(3), encoding="utf-8")
    logger = MagicMock()
    tailer = TickFileTailer(path, from_start=True, logger=logger)
    assert len(tailer.read_new()) == 3

    path.write_text(_line(6), encoding="utf-8")
    assert [r.seq for r in tailer.read_new()] == [6]
    assert tailer.gaps == [(3, 6)]
    assert logger.info.call_args.args[0] == "tick_file_truncated"
    assert logger.warning.call_args.kwargs["missed"] == 2


def test_tailer_counts_invalid_lines(tmp_path) -> None:
    path = tmp_path / "ticks.jsonl"
    path.write_text("oops\n" + _line(1), encoding="utf-8")
    tailer = TickFileTailer(path, from_start=True, logger=MagicMock())
    assert [r.seq for r in tailer.read_new()] == [1]
    assert tailer.invalid_lines == 1


def test_tailer_missing_file(tmp_path) -> None:
    tailer = TickFileTailer(tmp_path / "absent.jsonl", logger=MagicMock())
    assert tailer.read_new() == []
