"""Engine components wiring feed → cursor → encoder → sink."""

from .cursor import Cursor, IndexCursor, SequenceCursor
from .encoder import RecordEncoder
from .feed import InMemoryFeed, ReplayFeed, TickFeed
from .reader import TickFileTailer
from .records import OutputRecord, TickRecord, TickType
from .sink import BaseSink, DeliveryOutcome, FileSink, SinkState, SocketSink
from .timestamps import serial_to_unix_ms

__all__ = [
    "BaseSink",
    "Cursor",
    "DeliveryOutcome",
    "FileSink",
    "InMemoryFeed",
    "IndexCursor",
    "OutputRecord",
    "RecordEncoder",
    "ReplayFeed",
    "SequenceCursor",
    "SinkState",
    "SocketSink",
    "TickFeed",
    "TickFileTailer",
    "TickRecord",
    "TickType",
    "serial_to_unix_ms",
]
