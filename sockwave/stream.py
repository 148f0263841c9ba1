"""Streams that WebSocket connections can be spoken over."""

from __future__ import annotations

import socket
import ssl
from typing import Any


class ReadWritePair:
    """One stream built from a separate reader and writer.

    Reads go to ``reader`` and writes to ``writer``. This lets the two
    directions of a connection use different media.
    """

    def __init__(self, reader: Any, writer: Any) -> None:
        self.reader = reader
        self.writer = writer

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes from the reader."""
        return self.reader.read(size)

    def write(self, data: bytes) -> Any:
        """Write ``data`` to the writer."""
        return self.writer.write(data)

    def flush(self) -> None:
        """Flush the writer, if it can be flushed."""
        flush = getattr(self.writer, "flush", None)
        if flush is not None:
            flush()

    def split(self) -> tuple[Any, Any]:
        """The reading and the writing half."""
        return self.reader, self.writer


def split_stream(stream: Any) -> tuple[Any, Any]:
    """Split ``stream`` into a reading and a writing part.

    A :class:`ReadWritePair` yields its two halves; a plain socket yields a
    duplicate of itself for reading and itself for writing. TLS sockets
    cannot be split.
    """
    if isinstance(stream, ReadWritePair):
        return stream.split()
    if isinstance(stream, ssl.SSLSocket):
        raise TypeError("a TLS socket cannot be split")
    if isinstance(stream, socket.socket):
        return stream.dup(), stream
    raise TypeError(f"cannot split a {type(stream).__name__}")