"""TLS transport for external client connections."""

from __future__ import annotations

import logging
import ssl
from typing import Any, Optional

from .transport import Connection, NetworkError, NetworkHandler

_log = logging.getLogger(__name__)

CIPHER_LIST = (
    "ECDHE-ECDSA-AES256-GCM-SHA384:ECDHE-RSA-AES256-GCM-SHA384:!aNULL:!eNULL@STRENGTH"
)
ECDH_CURVE = "secp384r1"
HANDSHAKE_TIMEOUT = 3.0


def create_server_context(certfile: str, keyfile: str) -> ssl.SSLContext:
    """Build the server-side TLS context from PEM certificate and key files.

    Only TLS 1.2 and newer are accepted, compression is disabled and the
    server's cipher preference wins.  Raises NetworkError on any failure.
    """
    try:
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    except ssl.SSLError as exc:
        _log.error("Error creating SSL context: %s", exc)
        raise NetworkError(f"error creating SSL context: {exc}") from exc

    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.options |= ssl.OP_NO_COMPRESSION | ssl.OP_CIPHER_SERVER_PREFERENCE

    try:
        ctx.set_ciphers(CIPHER_LIST)
    except ssl.SSLError as exc:
        _log.error("No valid ciphers found!: %s", exc)
        raise NetworkError(f"no valid ciphers found: {exc}") from exc

    try:
        ctx.set_ecdh_curve(ECDH_CURVE)
    except (ValueError, ssl.SSLError) as exc:
        _log.warning("Could not select ECDH curve %s: %s", ECDH_CURVE, exc)

    try:
        ctx.load_cert_chain(certfile, keyfile)
    except OSError as exc:
        _log.error(
            "Error with certificate file '%s' or private key file '%s': %s",
            certfile,
            keyfile,
            exc,
        )
        raise NetworkError(
            f"error loading certificate '{certfile}' / key '{keyfile}': {exc}"
        ) from exc
    return ctx


def _require_tls(conn: Optional[Connection], operation: str) -> Any:
    if conn is None:
        raise NetworkError(f"{operation} called with invalid connection")
    if conn.sock is None:
        raise NetworkError(f"{operation} called on a connection without a socket")
    if conn.handler_data is None:
        raise NetworkError(f"{operation} called without a TLS session")
    return conn.handler_data


class TlsHandler(NetworkHandler):
    """Encrypted TLS transport.

    After a successful accept the connection's socket and handler data both
    refer to the TLS-wrapped socket.
    """

    def __init__(self, context: Optional[ssl.SSLContext] = None) -> None:
        self._context = context

    @property
    def context(self) -> Optional[ssl.SSLContext]:
        return self._context

    def init(self, handler_data: Any) -> None:
        """Load the combined certificate/key PEM file named by ``handler_data``."""
        if not handler_data:
            self._context = None
            _log.error("Cannot initialize TLS without cert/key file!")
            raise NetworkError("cannot initialize TLS without cert/key file")
        self._context = None
        self._context = create_server_context(handler_data, handler_data)

    def cleanup(self) -> None:
        self._context = None

    def on_accept(self, net_state: Any, conn: Connection) -> None:
        """Wrap the accepted socket and run the TLS handshake.

        A failed handshake closes the client through ``net_state.close_client``.
        """
        if net_state is None or conn is None:
            _log.error("on_accept called with invalid pointer")
            raise NetworkError("on_accept called with invalid arguments")
        if conn.sock is None:
            _log.error("on_accept called with invalid socket")
            raise NetworkError("on_accept called on a connection without a socket")
        if self._context is None:
            _log.error("on_accept called before the TLS context was initialised")
            raise NetworkError("TLS context is not initialised")

        try:
            tls_sock = self._context.wrap_socket(
                conn.sock, server_side=True, do_handshake_on_connect=False
            )
        except (OSError, ValueError) as exc:
            _log.error("Could not create TLS session: %s", exc)
            raise NetworkError(f"could not create TLS session: {exc}") from exc
        conn.sock = tls_sock
        conn.handler_data = tls_sock

        try:
            # Keeps a client that never starts the handshake from hanging us.
            tls_sock.settimeout(HANDSHAKE_TIMEOUT)
        except OSError as exc:
            _log.error("Setting the receive timeout failed: %s", exc)
            raise NetworkError(f"setting receive timeout failed: {exc}") from exc

        try:
            tls_sock.do_handshake()
        except OSError as exc:
            if isinstance(exc, TimeoutError):
                reason = (
                    "Timeout waiting for the connecting client to "
                    "initiate the SSL handshake!"
                )
            else:
                reason = str(exc)
            _log.error("SSL_accept() failed: %s", reason)
            conn.handler_data = None
            net_state.close_client(conn)
            raise NetworkError(f"TLS handshake failed: {reason}") from exc

        self._log_peer_certificate(tls_sock)
        _log.debug("Accepted TLS client")

    @staticmethod
    def _log_peer_certificate(tls_sock: Any) -> None:
        der = tls_sock.getpeercert(binary_form=True)
        if not der:
            _log.error("No client certificate")
            return
        details = tls_sock.getpeercert() or {}
        _log.debug("Client certificate subject: %s", details.get("subject"))
        _log.debug("Client certificate issuer: %s", details.get("issuer"))

    def init_client(self, conn: Connection) -> None:
        if conn is None:
            _log.error("init_client called with invalid pointer")
            raise NetworkError("init_client called with invalid connection")
        conn.handler_data = None

    def on_close_client(self, conn: Connection) -> None:
        if conn is None:
            _log.error("on_close_client called with invalid pointer")
            raise NetworkError("on_close_client called with invalid connection")
        conn.handler_data = None

    def recv(self, conn: Connection, size: int) -> tuple[bytes, bool]:
        """Read up to ``size`` bytes.

        An empty result means the peer closed the session or no data could be
        read without blocking.
        """
        tls_sock = _require_tls(conn, "recv")
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        try:
            data = tls_sock.recv(size)
        except ssl.SSLZeroReturnError:
            _log.debug("Connection was closed")
            return b"", False
        except (ssl.SSLWantReadError, ssl.SSLWantWriteError):
            _log.error("Read BLOCK")
            return b"", False
        except OSError as exc:
            _log.error("SSL_read() failed: %s", exc)
            raise NetworkError(f"TLS read failed: {exc}") from exc
        if not data:
            return b"", False
        return data, tls_sock.pending() > 0

    def send(self, conn: Connection, data: bytes) -> int:
        """Write ``data``; return the number of bytes sent (0 if it would block)."""
        if data is None:
            raise NetworkError("send called with invalid buffer")
        tls_sock = _require_tls(conn, "send")
        try:
            return tls_sock.send(data)
        except (ssl.SSLWantReadError, ssl.SSLWantWriteError) as exc:
            _log.error("SSL_write() would block: %s", exc)
            return 0
        except OSError as exc:
            _log.error("SSL error on write! %s", exc)
            raise NetworkError(f"TLS write failed: {exc}") from exc