"""The Sec-WebSocket-Key and Sec-WebSocket-Accept handshake values."""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from dataclasses import dataclass, field

from .errors import ProtocolError

PROTOCOL = "Sec-WebSocket-Protocol"
ACCEPT = "Sec-WebSocket-Accept"
EXTENSIONS = "Sec-WebSocket-Extensions"
KEY = "Sec-WebSocket-Key"

MAGIC_GUID = "258EAFA5-E914-47DA-95CA-C5AB0DC85B11"


def _decode(text: str, size: int, length_error: str, invalid_error: str) -> bytes:
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ProtocolError(invalid_error) from err
    if len(raw) != size:
        raise ProtocolError(length_error)
    return raw


@dataclass(frozen=True, repr=False)
class WebSocketKey:
    """The 16 raw bytes of a Sec-WebSocket-Key header."""

    key: bytes = field(default=bytes(16))

    def __post_init__(self) -> None:
        key = bytes(self.key)
        if len(key) != 16:
            raise ValueError("a WebSocket key is 16 bytes")
        object.__setattr__(self, "key", key)

    def __repr__(self) -> str:
        return f"WebSocketKey({self.serialize()})"

    @classmethod
    def generate(cls) -> WebSocketKey:
        """A new random key."""
        return cls(os.urandom(16))

    @classmethod
    def parse(cls, key: str) -> WebSocketKey:
        """Parse the base64 header value."""
        return cls(
            _decode(
                key,
                16,
                "Sec-WebSocket-Key must be 16 bytes",
                "Invalid Sec-WebSocket-Accept",
            )
        )

    def serialize(self) -> str:
        """The base64 header value."""
        return base64.b64encode(self.key).decode("ascii")


@dataclass(frozen=True, repr=False)
class WebSocketAccept:
    """The 20 raw bytes of a Sec-WebSocket-Accept header."""

    accept: bytes

    def __post_init__(self) -> None:
        accept = bytes(self.accept)
        if len(accept) != 20:
            raise ValueError("a WebSocket accept value is 20 bytes")
        object.__setattr__(self, "accept", accept)

    def __repr__(self) -> str:
        return f"WebSocketAccept({self.serialize()})"

    @classmethod
    def from_key(cls, key: WebSocketKey) -> WebSocketAccept:
        """The accept value a server answers ``key`` with."""
        digest = hashlib.sha1((key.serialize() + MAGIC_GUID).encode("ascii")).digest()
        return cls(digest)

    @classmethod
    def parse(cls, accept: str) -> WebSocketAccept:
        """Parse the base64 header value."""
        return cls(
            _decode(
                accept,
                20,
                "Sec-WebSocket-Accept must be 20 bytes",
                "Invalid Sec-WebSocket-Accept ",
            )
        )

    def serialize(self) -> str:
        """The base64 header value."""
        return base64.b64encode(self.accept).decode("ascii")