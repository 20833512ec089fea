"""Sink SPI and implementations."""

from .base import BaseSink, DeliveryOutcome
from .file_sink import FileSink
from .socket_sink import SinkState, SocketSink

__all__ = ["BaseSink", "DeliveryOutcome", "FileSink", "SinkState", "SocketSink"]
