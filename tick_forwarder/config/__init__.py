"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    LOOPBACK_HOST,
    FeedConfig,
    FileSinkConfig,
    ForwarderConfig,
    PollConfig,
    SinkKind,
    SocketSinkConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "FeedConfig",
    "FileSinkConfig",
    "ForwarderConfig",
    "LOOPBACK_HOST",
    "PollConfig",
    "SinkKind",
    "SocketSinkConfig",
]
