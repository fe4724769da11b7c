"""Connection record, transport handler interface and the plain TCP handler."""

from __future__ import annotations

import logging
import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

_log = logging.getLogger(__name__)


class NetworkError(Exception):
    """Raised when a network operation cannot be carried out."""


class HandlerType(IntEnum):
    """Kinds of external network handler."""

    NON_ENCRYPT = 0
    TLS = 1


@dataclass
class Connection:
    """An external client connection.

    ``sock`` is ``None`` while the slot is unused; ``handler_data`` holds
    whatever private state the transport handler attaches to the connection.
    """

    sock: Optional[socket.socket] = None
    handler_data: Any = None

    @property
    def closed(self) -> bool:
        return self.sock is None


def _require_open(conn: Optional[Connection], operation: str) -> socket.socket:
    if conn is None:
        raise NetworkError(f"{operation} called with invalid connection")
    if conn.sock is None:
        raise NetworkError(f"{operation} called on a connection without a socket")
    return conn.sock


class NetworkHandler(ABC):
    """Operations a transport must provide for external connections."""

    @abstractmethod
    def init(self, handler_data: Any) -> None:
        """Prepare the handler; raise NetworkError on failure."""

    @abstractmethod
    def cleanup(self) -> None:
        """Release any resources held by the handler."""

    @abstractmethod
    def on_accept(self, net_state: Any, conn: Connection) -> None:
        """Finish setting up a freshly accepted connection."""

    @abstractmethod
    def init_client(self, conn: Connection) -> None:
        """Reset the handler's per-connection state."""

    @abstractmethod
    def on_close_client(self, conn: Connection) -> None:
        """Release the handler's per-connection state before the socket closes."""

    @abstractmethod
    def recv(self, conn: Connection, size: int) -> tuple[bytes, bool]:
        """Read up to ``size`` bytes; return the data and whether more is pending."""

    @abstractmethod
    def send(self, conn: Connection, data: bytes) -> int:
        """Write ``data``; return the number of bytes sent."""


class TcpHandler(NetworkHandler):
    """Unencrypted TCP transport."""

    def init(self, handler_data: Any) -> None:
        """Plain TCP needs no set-up."""

    def cleanup(self) -> None:
        """Plain TCP holds no resources."""

    def on_accept(self, net_state: Any, conn: Connection) -> None:
        """Accepted TCP connections need no negotiation."""

    def init_client(self, conn: Connection) -> None:
        """Plain TCP keeps no per-connection state."""

    def on_close_client(self, conn: Connection) -> None:
        """Plain TCP keeps no per-connection state."""

    def recv(self, conn: Connection, size: int) -> tuple[bytes, bool]:
        sock = _require_open(conn, "recv")
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        try:
            data = sock.recv(size)
        except OSError as exc:
            _log.error("recv failed: %s", exc)
            raise NetworkError(f"recv failed: {exc}") from exc
        return data, False

    def send(self, conn: Connection, data: bytes) -> int:
        if data is None:
            raise NetworkError("send called with invalid buffer")
        sock = _require_open(conn, "send")
        try:
            return sock.send(data)
        except OSError as exc:
            _log.error("send failed: %s", exc)
            raise NetworkError(f"send failed: {exc}") from exc