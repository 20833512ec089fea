"""Non-blocking TCP client sink with reconnect and backpressure policy."""

from __future__ import annotations

import errno
import socket
from enum import Enum
from typing import Callable

import structlog

from ...config.models import LOOPBACK_HOST
from ...logging_conf import component_logger
from ..records import OutputRecord
from .base import BaseSink, DeliveryOutcome


def _codes(*names: str) -> frozenset[int]:
    return frozenset(getattr(errno, name) for name in names if hasattr(errno, name))


# connect_ex results meaning "still in progress, ask again later"
_CONNECT_PENDING = _codes("EINPROGRESS", "EWOULDBLOCK", "EALREADY", "WSAEWOULDBLOCK", "WSAEALREADY")
_CONNECT_DONE = _codes("EISCONN", "WSAEISCONN") | {0}
# socket() failures that no retry can fix
_SETUP_FATAL = _codes("EAFNOSUPPORT", "EPROTONOSUPPORT", "ESOCKTNOSUPPORT", "EPROTOTYPE", "EINVAL")

SocketFactory = Callable[[], socket.socket]


class SinkState(str, Enum):
    """Connection lifecycle of the socket sink."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def nonblocking_tcp_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        sock.setblocking(False)
    except OSError:
        sock.close()
        raise
    return sock


class SocketSink(BaseSink):
    """Stream tick lines to a loopback TCP peer without ever blocking.

    Every poll advances the connection state machine by at most one step. A
    send that would block drops that single record; any other send error
    tears the connection down and the next poll starts over with a new socket.
    A short write still counts as delivered and the unsent tail is dropped, so
    the peer sees that line merged with the next one.

    Failing to create a socket is retried on the next poll unless the platform
    cannot provide TCP at all, which disables the sink for good.
    """

    def __init__(
        self,
        port: int,
        host: str = LOOPBACK_HOST,
        socket_factory: SocketFactory | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.address = (host, port)
        self.logger = logger or component_logger("socket_sink")
        self._socket_factory = socket_factory or nonblocking_tcp_socket
        self._socket: socket.socket | None = None
        self.state = SinkState.DISCONNECTED
        self.disabled = False
        self.connect_attempts = 0
        self.skipped = 0

    @property
    def connected(self) -> bool:
        return self.state is SinkState.CONNECTED

    # ------------------------------------------------------------------
    # Connection state machine
    # ------------------------------------------------------------------
    def ensure_connected(self) -> bool:
        if self.disabled:
            return False
        if self.state is SinkState.CONNECTED:
            return True
        if self.state is SinkState.DISCONNECTED:
            try:
                self._socket = self._socket_factory()
            except OSError as exc:
                if exc.errno in _SETUP_FATAL:
                    self.disabled = True
                    self.logger.error(
                        "socket_setup_failed", error=str(exc), address=self._address_label
                    )
                else:
                    self.logger.warning(
                        "socket_create_failed", error=str(exc), address=self._address_label
                    )
                return False
            self.state = SinkState.CONNECTING
            self.connect_attempts += 1

        try:
            code = self._socket.connect_ex(self.address)
        except OSError as exc:
            code = exc.errno or errno.ECONNREFUSED

        if code in _CONNECT_DONE:
            self.state = SinkState.CONNECTED
            self.logger.info("socket_connected", address=self._address_label)
            return True
        if code in _CONNECT_PENDING:
            return False
        self.logger.debug(
            "socket_connect_failed",
            address=self._address_label,
            errno=code,
            reason=errno.errorcode.get(code, "unknown"),
        )
        self._teardown()
        return False

    def begin_batch(self) -> bool:
        return self.ensure_connected()

    def deliver(self, record: OutputRecord) -> DeliveryOutcome:
        if self.state is not SinkState.CONNECTED or self._socket is None:
            return DeliveryOutcome.FAILED
        payload = record.to_line().encode("utf-8")
        try:
            sent = self._socket.send(payload)
        except BlockingIOError:
            self.skipped += 1
            self.logger.debug("socket_send_would_block", seq=record.seq)
            return DeliveryOutcome.SKIPPED
        except OSError as exc:
            self.logger.error(
                "socket_connection_lost", address=self._address_label, seq=record.seq, error=str(exc)
            )
            self._teardown()
            return DeliveryOutcome.FAILED
        if sent < len(payload):
            self.logger.warning("socket_short_write", seq=record.seq, sent=sent, size=len(payload))
        return DeliveryOutcome.DELIVERED

    def close(self) -> None:
        self._teardown()

    def describe(self) -> str:
        return f"socket:{self._address_label}"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _address_label(self) -> str:
        return f"{self.address[0]}:{self.address[1]}"

    def _teardown(self) -> None:
        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                self.logger.debug("socket_close_failed", address=self._address_label)
            self._socket = None
        self.state = SinkState.DISCONNECTED


__all__ = ["SinkState", "SocketFactory", "SocketSink", "nonblocking_tcp_socket"]
