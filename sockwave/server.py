"""A blocking WebSocket server that hands out pending upgrades."""

from __future__ import annotations

import socket
import ssl
from collections.abc import Iterator
from typing import Any

from .sync_upgrade import into_ws
from .upgrade import InvalidConnection, UpgradeError, UpgradeErrorKind, WsUpgrade

_BACKLOG = 128


def _split_address(addr: Any) -> tuple[str, int]:
    if isinstance(addr, str):
        host, sep, port = addr.rpartition(":")
        if not sep or not host:
            raise ValueError(f"invalid socket address: {addr!r}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        return host, int(port)
    return addr[0], int(addr[1])


def _listen(addr: Any) -> socket.socket:
    host, port = _split_address(addr)
    last_error: OSError | None = None
    for family, _, _, _, sockaddr in socket.getaddrinfo(
        host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
    ):
        try:
            return socket.create_server(sockaddr, family=family, backlog=_BACKLOG)
        except OSError as err:
            last_error = err
    if last_error is not None:
        raise last_error
    raise OSError(f"could not resolve to any address: {addr!r}")


class Server:
    """Listens for TCP connections and reads their WebSocket handshakes.

    With an SSL context, every accepted connection is wrapped in TLS first.
    """

    def __init__(
        self, listener: socket.socket, ssl_context: ssl.SSLContext | None = None
    ) -> None:
        self._listener = listener
        self.ssl_context = ssl_context

    @classmethod
    def bind(cls, addr: Any) -> Server:
        """Listen on ``addr``, given as ``"host:port"`` or ``(host, port)``."""
        return cls(_listen(addr))

    @classmethod
    def bind_secure(cls, addr: Any, context: ssl.SSLContext) -> Server:
        """Listen on ``addr`` and speak TLS using the server-side ``context``."""
        return cls(_listen(addr), context)

    def local_addr(self) -> Any:
        """The address the server listens on."""
        return self._listener.getsockname()

    def set_nonblocking(self, nonblocking: bool) -> None:
        """In nonblocking mode :meth:`accept` fails instead of waiting."""
        self._listener.setblocking(not nonblocking)

    def accept(self) -> WsUpgrade:
        """Wait for a connection and return its pending WebSocket upgrade.

        Raises :class:`InvalidConnection` when no usable handshake arrives.
        """
        try:
            stream, _ = self._listener.accept()
        except OSError as err:
            raise InvalidConnection(UpgradeError(UpgradeErrorKind.IO, err)) from err

        if self.ssl_context is not None:
            try:
                stream = self.ssl_context.wrap_socket(stream, server_side=True)
            except OSError as err:
                stream.close()
                raise InvalidConnection(
                    UpgradeError(UpgradeErrorKind.IO, err)
                ) from err

        return into_ws(stream)

    def try_clone(self) -> Server:
        """A new server sharing the same listening socket."""
        return Server(self._listener.dup(), self.ssl_context)

    def close(self) -> None:
        """Stop listening."""
        self._listener.close()

    def __iter__(self) -> Iterator[WsUpgrade | InvalidConnection]:
        """Yield each accepted upgrade, or the failure of one; never ends."""
        while True:
            try:
                yield self.accept()
            except InvalidConnection as failure:
                yield failure

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()