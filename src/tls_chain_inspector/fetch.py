from __future__ import annotations

import logging
import math
import selectors
import socket
import time

from cryptography.hazmat.primitives import serialization
from OpenSSL import SSL

from .errors import (
    ConnectError,
    EmptyChainError,
    FetchTimeoutError,
    HandshakeError,
    ResolutionError,
)
from .models import DEFAULT_TIMEOUT, Target

log = logging.getLogger(__name__)


def _inspection_context() -> SSL.Context:
    """
    Client context for looking at a chain, not for trusting it.
    Peer verification is off so expired, self-signed or otherwise untrusted
    chains still complete the handshake. Never use it to move application data.
    """
    ctx = SSL.Context(SSL.TLS_CLIENT_METHOD)
    ctx.set_verify(SSL.VERIFY_NONE, lambda *args: True)
    return ctx


def _connect(target: Target, timeout: float) -> socket.socket:
    try:
        return socket.create_connection((target.host, target.port), timeout=timeout)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(f"cannot resolve {target.host}: {e}") from e
    except socket.timeout as e:
        raise FetchTimeoutError(f"connecting to {target} timed out after {timeout}s") from e
    except OSError as e:
        raise ConnectError(f"cannot connect to {target}: {e}") from e


def _handshake(conn: SSL.Connection, sock: socket.socket, target: Target, deadline: float) -> None:
    # the socket carries a timeout, so it is non-blocking underneath and
    # OpenSSL reports WantRead/WantWrite instead of waiting
    with selectors.DefaultSelector() as sel:
        sel.register(sock, selectors.EVENT_READ)
        while True:
            try:
                conn.do_handshake()
                return
            except SSL.WantReadError:
                sel.modify(sock, selectors.EVENT_READ)
            except SSL.WantWriteError:
                sel.modify(sock, selectors.EVENT_WRITE)

            remaining = deadline - time.monotonic()
            if remaining <= 0 or not sel.select(remaining):
                raise FetchTimeoutError(f"TLS handshake with {target} timed out")


def fetch_chain(target: Target, timeout: float = DEFAULT_TIMEOUT) -> list[bytes]:
    """
    Connect to `target`, complete a TLS handshake without trust checks and
    return the DER certificates the server presented, leaf first, in the
    order they were sent. One attempt, one connection, closed before returning.
    `timeout` bounds connect and handshake together.
    """
    if not (timeout > 0 and math.isfinite(timeout)):
        raise ValueError("timeout must be a positive finite number")

    deadline = time.monotonic() + timeout
    log.debug("connecting to %s (timeout %ss)", target, timeout)

    with _connect(target, timeout) as sock:
        conn = SSL.Connection(_inspection_context(), sock)
        if not target.is_ip:
            # IP addresses are not permitted in SNI
            conn.set_tlsext_host_name(target.host.encode("idna"))
        conn.set_connect_state()

        try:
            _handshake(conn, sock, target, deadline)
        except SSL.SysCallError as e:
            raise ConnectError(f"connection to {target} dropped during handshake: {e}") from e
        except SSL.Error as e:
            raise HandshakeError(f"TLS handshake with {target} failed: {e}") from e

        log.debug("handshake with %s done (%s)", target, conn.get_protocol_version_name())
        peer_certs = conn.get_peer_cert_chain() or []
        ders = [c.to_cryptography().public_bytes(serialization.Encoding.DER) for c in peer_certs]

    if not ders:
        raise EmptyChainError(f"chain of peer certificates for {target} is empty")
    log.debug("%s presented %d certificate(s)", target, len(ders))
    return ders
