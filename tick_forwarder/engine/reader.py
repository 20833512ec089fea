"""Consumer-side reader for the tick file written by FileSink."""

from __future__ import annotations

from pathlib import Path

import structlog

from ..logging_conf import component_logger
from .records import OutputRecord


class TickFileTailer:
    """Incrementally read appended tick lines, surviving rotation.

    By default reading starts at the current end of the file so only ticks
    written after construction are returned.
    """

    def __init__(
        self,
        path: Path,
        from_start: bool = False,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.path = Path(path)
        self.logger = logger or component_logger("tick_tailer")
        self.position = 0
        self.last_seq: int | None = None
        self.gaps: list[tuple[int, int]] = []
        self.invalid_lines = 0
        if not from_start and self.path.exists():
            self.position = self.path.stat().st_size

    def read_new(self) -> list[OutputRecord]:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return []
        if size < self.position:
            self.logger.info("tick_file_truncated", path=str(self.path), position=self.position, size=size)
            self.position = 0
        if size == self.position:
            return []

        with self.path.open("rb") as stream:
            stream.seek(self.position)
            chunk = stream.read(size - self.position)

        # A line without its newline is still being written; leave it for next time.
        complete, _, _partial = chunk.rpartition(b"\n")
        if not complete and not chunk.endswith(b"\n"):
            return []
        self.position += len(complete) + 1

        records: list[OutputRecord] = []
        for raw in complete.decode("utf-8", errors="replace").split("\n"):
            line = raw.strip()
            if not line:
                continue
            try:
                record = OutputRecord.from_line(line)
            except ValueError as exc:
                self.invalid_lines += 1
                self.logger.warning("tick_line_invalid", path=str(self.path), error=str(exc))
                continue
            self._track_sequence(record)
            records.append(record)
        return records

    def _track_sequence(self, record: OutputRecord) -> None:
        previous = self.last_seq
        if previous is not None and record.seq != previous + 1:
            self.gaps.append((previous, record.seq))
            self.logger.warning(
                "tick_sequence_gap",
                previous=previous,
                current=record.seq,
                missed=record.seq - previous - 1,
            )
        self.last_seq = record.seq


__all__ = ["TickFileTailer"]
