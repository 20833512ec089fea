"""Spreadsheet-style serial date-time to Unix epoch milliseconds."""

from __future__ import annotations

UNIX_EPOCH_SERIAL_DAYS = 25569.0
MILLISECONDS_PER_DAY = 86_400_000


def _truncate_to_second(value_ms: int) -> int:
    # Integer division toward zero, matching the feed's native arithmetic.
    whole = abs(value_ms) // 1000 * 1000
    return whole if value_ms >= 0 else -whole


def serial_to_unix_ms(serial: float, milliseconds: int) -> int:
    """Convert a serial date plus its millisecond-of-second to Unix epoch ms.

    The float serial loses sub-second precision at large day counts, so its
    millisecond remainder is discarded and replaced by ``milliseconds``.
    Out-of-range millisecond values are used unchanged.
    """

    whole_ms = round((serial - UNIX_EPOCH_SERIAL_DAYS) * MILLISECONDS_PER_DAY)
    return _truncate_to_second(whole_ms) + int(milliseconds)


def unix_ms_to_serial(value_ms: int) -> float:
    return UNIX_EPOCH_SERIAL_DAYS + value_ms / MILLISECONDS_PER_DAY


def split_serial(serial: float) -> int:
    """Return the millisecond-of-second encoded in a serial value."""

    whole_ms = round((serial - UNIX_EPOCH_SERIAL_DAYS) * MILLISECONDS_PER_DAY)
    return whole_ms - _truncate_to_second(whole_ms)


__all__ = [
    "MILLISECONDS_PER_DAY",
    "UNIX_EPOCH_SERIAL_DAYS",
    "serial_to_unix_ms",
    "split_serial",
    "unix_ms_to_serial",
]
