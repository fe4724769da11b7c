"""External network interface: listening socket, client connections and I/O."""

from __future__ import annotations

import logging
import socket
from typing import Any, Optional

from .tls import TlsHandler
from .transport import (
    Connection,
    HandlerType,
    NetworkError,
    NetworkHandler,
    TcpHandler,
)

_log = logging.getLogger(__name__)

_IFNAMSIZ = 16


def _make_handler(handler_type: Any) -> NetworkHandler:
    try:
        kind = HandlerType(handler_type)
    except ValueError:
        _log.error("Invalid external network handler %s!", handler_type)
        raise NetworkError(f"invalid external network handler {handler_type}") from None
    if kind is HandlerType.TLS:
        return TlsHandler()
    return TcpHandler()


class ExtNet:
    """Accepts external clients and moves data through the chosen transport.

    ``handler_data`` is passed to the transport's ``init``; for TLS it names the
    combined certificate/key PEM file.  A ready-made ``handler`` may be given
    instead of the one ``handler_type`` selects.
    """

    def __init__(
        self,
        handler_type: Any,
        handler_data: Any,
        max_sessions: int,
        *,
        handler: Optional[NetworkHandler] = None,
    ) -> None:
        if handler_data is None:
            raise NetworkError("network handler data is required")
        self.max_sessions = max_sessions
        self.handler = handler if handler is not None else _make_handler(handler_type)
        # Broken pipes surface as BrokenPipeError rather than a signal.
        self.handler.init(handler_data)

    def open_external_socket(
        self, bind_interface: Optional[str], port: int
    ) -> socket.socket:
        """Create, bind and listen on an IPv6 TCP socket.

        With ``bind_interface`` set, the socket is bound to that network
        device; otherwise it listens on all interfaces.
        """
        where = f"{bind_interface or '*'}:{port}"
        try:
            sock = socket.socket(socket.AF_INET6, socket.SOCK_STREAM)
        except OSError as exc:
            _log.error("Error creating socket on %s. %s", where, exc)
            raise NetworkError(f"error creating socket on {where}: {exc}") from exc

        try:
            self._configure_and_listen(sock, bind_interface, port, where)
        except BaseException:
            sock.close()
            raise
        return sock

    def _configure_and_listen(
        self,
        sock: socket.socket,
        bind_interface: Optional[str],
        port: int,
        where: str,
    ) -> None:
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as exc:
            _log.error("setsockopt(TCP_NODELAY) failed: %s", exc)
            raise NetworkError(f"setsockopt(TCP_NODELAY) failed: {exc}") from exc

        # An unclean client disconnect should not delay rebinding.
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as exc:
            _log.error("setsockopt(SO_REUSEADDR) failed: %s", exc)
            raise NetworkError(f"setsockopt(SO_REUSEADDR) failed: {exc}") from exc

        if bind_interface:
            option = getattr(socket, "SO_BINDTODEVICE", None)
            if option is None:
                raise NetworkError("binding to a device is not supported here")
            name = bind_interface.encode()[:_IFNAMSIZ]
            try:
                sock.setsockopt(socket.SOL_SOCKET, option, name)
            except OSError as exc:
                _log.error(
                    "setsockopt(SO_BINDTODEVICE '%s') failed; %s", bind_interface, exc
                )
                raise NetworkError(
                    f"setsockopt(SO_BINDTODEVICE '{bind_interface}') failed: {exc}"
                ) from exc

        try:
            sock.bind(("::", port))
        except OSError as exc:
            _log.error("Error binding to socket on %s. %s", where, exc)
            raise NetworkError(f"error binding to socket on {where}: {exc}") from exc

        try:
            sock.listen(self.max_sessions)
        except OSError as exc:
            _log.error("Error listen on external socket: %s", exc)
            raise NetworkError(f"error listening on external socket: {exc}") from exc

    def accept_connection(self, listen_sock: socket.socket) -> Connection:
        """Accept a client and let the transport finish the set-up.

        If the transport rejects the client, the connection is closed and the
        transport's error is raised.
        """
        try:
            client, _addr = listen_sock.accept()
        except OSError as exc:
            _log.error("accept() failed: %s", exc)
            raise NetworkError(f"accept() failed: {exc}") from exc

        conn = Connection(sock=client)
        _log.debug("Accepted client fd %d", client.fileno())
        try:
            self.handler.on_accept(self, conn)
        except BaseException:
            if not conn.closed:
                try:
                    self.close_client(conn)
                except NetworkError as close_exc:
                    _log.error("Closing rejected client failed: %s", close_exc)
            raise
        return conn

    def init_client(self, conn: Connection) -> None:
        """Mark ``conn`` as unused and reset the transport's state for it."""
        if conn is None:
            _log.error("init_client called with invalid pointer")
            raise NetworkError("init_client called with invalid connection")
        conn.sock = None
        self.handler.init_client(conn)

    def close_client(self, conn: Connection) -> None:
        """Release the transport's state and close the client's socket."""
        if conn is None:
            _log.error("close_client called with invalid pointer")
            raise NetworkError("close_client called with invalid connection")
        if conn.sock is None:
            raise NetworkError("close_client called on a closed connection")

        sock = conn.sock
        _log.debug("Closing client fd %d", sock.fileno())
        try:
            self.handler.on_close_client(conn)
        finally:
            conn.sock = None
            conn.handler_data = None
            try:
                sock.close()
            except OSError as exc:
                _log.error("Failed to close client socket: %s", exc)
                raise NetworkError(f"failed to close client socket: {exc}") from exc

    def is_client_closed(self, conn: Connection) -> bool:
        """Return whether ``conn`` has no open socket."""
        if conn is None:
            _log.error("is_client_closed called with invalid pointer")
            raise NetworkError("is_client_closed called with invalid connection")
        return conn.closed

    def recv(self, conn: Connection, size: int) -> tuple[bytes, bool]:
        """Read up to ``size`` bytes; return the data and whether more is pending."""
        if conn is None:
            raise NetworkError("recv called with invalid connection")
        return self.handler.recv(conn, size)

    def send(self, conn: Connection, data: bytes) -> int:
        """Write ``data`` to the client; return the number of bytes sent."""
        if conn is None:
            raise NetworkError("send called with invalid connection")
        if data is None:
            raise NetworkError("send called with invalid buffer")
        return self.handler.send(conn, data)