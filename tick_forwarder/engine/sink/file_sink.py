"""Append-only JSON lines file sink with size-based rotation."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import structlog

from ...logging_conf import component_logger
from ..records import OutputRecord
from .base import BaseSink, DeliveryOutcome


class FileSink(BaseSink):
    """Write tick lines to a local file, truncating it past ``max_size_kb``.

    Rotation deletes the file outright; readers must cope with the file
    shrinking to zero and being appended to again.
    """

    passthrough_unknown = True

    def __init__(
        self,
        path: Path,
        max_size_kb: int = 0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.path = Path(path)
        self.max_size_kb = max_size_kb
        self.logger = logger or component_logger("file_sink")
        self._file: TextIO | None = None
        self.rotations = 0

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_kb * 1024

    def begin_batch(self) -> bool:
        self.rotate_if_needed()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("a", encoding="utf-8", newline="\n")
        except OSError as exc:
            self.logger.error(
                "tick_file_open_failed", path=str(self.path), errno=exc.errno, error=str(exc)
            )
            self._file = None
            return False
        return True

    def rotate_if_needed(self) -> bool:
        if self.max_size_kb <= 0:
            return False
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return False
        except OSError as exc:
            self.logger.warning("tick_file_stat_failed", path=str(self.path), error=str(exc))
            return False
        if size <= self.max_size_bytes:
            return False
        try:
            self.path.unlink()
        except OSError as exc:
            self.logger.error("tick_file_rotate_failed", path=str(self.path), error=str(exc))
            return False
        self.rotations += 1
        self.logger.info("tick_file_rotated", path=str(self.path), size=size, limit_kb=self.max_size_kb)
        return True

    def deliver(self, record: OutputRecord) -> DeliveryOutcome:
        if self._file is None:
            return DeliveryOutcome.FAILED
        try:
            self._file.write(record.to_line())
        except OSError as exc:
            self.logger.error("tick_file_write_failed", path=str(self.path), error=str(exc))
            return DeliveryOutcome.FAILED
        return DeliveryOutcome.DELIVERED

    def end_batch(self) -> None:
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as exc:
            self.logger.error("tick_file_close_failed", path=str(self.path), error=str(exc))
        finally:
            self._file = None

    def close(self) -> None:
        self.end_batch()

    def describe(self) -> str:
        return f"file:{self.path}"


__all__ = ["FileSink"]
