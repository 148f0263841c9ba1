"""WebSocket messages, in a payload-centred form and as owned variants."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any, Iterable

from .dataframe import Opcode
from .errors import NoDataAvailable, ProtocolError, io_error
from .framing import Frame
from .util import bytes_to_string

_NO_RESERVED = (False, False, False)


class MessageType(enum.IntEnum):
    """The kinds of message, valued by their opcode."""

    TEXT = 1
    BINARY = 2
    CLOSE = 8
    PING = 9
    PONG = 10


def _write(socket: Any, data: bytes) -> None:
    try:
        socket.write(data)
    except OSError as err:
        raise io_error(err) from err


@dataclass(frozen=True)
class CloseData:
    """Status code and reason carried by a close message."""

    status_code: int
    reason: str

    def to_bytes(self) -> bytes:
        """The close payload: a big-endian status code followed by the reason."""
        return struct.pack(">H", self.status_code) + self.reason.encode("utf-8")


@dataclass
class Message(Frame):
    """A message sent as a single data frame.

    ``status_code`` is only used by close messages; when present it is
    written in front of the payload.
    """

    kind: MessageType
    payload: bytes
    status_code: int | None = None

    @classmethod
    def text(cls, data: str) -> Message:
        """A text message."""
        return cls(MessageType.TEXT, data.encode("utf-8"))

    @classmethod
    def binary(cls, data: bytes) -> Message:
        """A binary message."""
        return cls(MessageType.BINARY, bytes(data))

    @classmethod
    def close(cls) -> Message:
        """A close message without a status code or reason."""
        return cls(MessageType.CLOSE, b"")

    @classmethod
    def close_because(cls, code: int, reason: str) -> Message:
        """A close message with a status code and a textual reason."""
        return cls(MessageType.CLOSE, reason.encode("utf-8"), code)

    @classmethod
    def ping(cls, data: bytes) -> Message:
        """A ping message."""
        return cls(MessageType.PING, bytes(data))

    @classmethod
    def pong(cls, data: bytes) -> Message:
        """A pong message."""
        return cls(MessageType.PONG, bytes(data))

    def into_pong(self) -> None:
        """Turn this ping into a pong carrying the same data."""
        if self.kind is not MessageType.PING:
            raise ValueError("only a ping message can become a pong")
        self.kind = MessageType.PONG

    def is_last(self) -> bool:
        return True

    def opcode(self) -> int:
        return int(self.kind)

    def reserved(self) -> tuple[bool, bool, bool]:
        return _NO_RESERVED

    def size(self) -> int:
        return len(self.payload) + (2 if self.status_code is not None else 0)

    def write_payload(self, socket: Any) -> None:
        _write(socket, self.take_payload())

    def take_payload(self) -> bytes:
        if self.status_code is not None:
            return struct.pack(">H", self.status_code) + bytes(self.payload)
        return bytes(self.payload)

    def serialize(self, writer: Any, masked: bool) -> None:
        """Write this message to ``writer`` as one frame."""
        self.write_to(writer, masked)

    def message_size(self, masked: bool) -> int:
        """Number of bytes this message takes on the wire."""
        return self.frame_size(masked)

    @classmethod
    def from_dataframes(cls, frames: Iterable[Frame]) -> Message:
        """Assemble a message from the frames that make it up."""
        frames = list(frames)
        if not frames:
            raise ProtocolError("No dataframes provided")
        try:
            opcode: Opcode | None = Opcode(frames[0].opcode())
        except ValueError:
            opcode = None

        collected = bytearray()
        for index, frame in enumerate(frames):
            if index > 0 and frame.opcode() != Opcode.CONTINUATION:
                raise ProtocolError("Unexpected non-continuation data frame")
            if tuple(frame.reserved()) != _NO_RESERVED:
                raise ProtocolError("Unsupported reserved bits received")
            collected += frame.take_payload()
        data = bytes(collected)

        if opcode is Opcode.TEXT:
            bytes_to_string(data)
            return cls(MessageType.TEXT, data)
        if opcode is Opcode.BINARY:
            return cls.binary(data)
        if opcode is Opcode.CLOSE:
            if not data:
                return cls.close()
            if len(data) < 2:
                raise NoDataAvailable()
            (status_code,) = struct.unpack_from(">H", data)
            return cls.close_because(status_code, bytes_to_string(data[2:]))
        if opcode is Opcode.PING:
            return cls.ping(data)
        if opcode is Opcode.PONG:
            return cls.pong(data)
        raise ProtocolError("Unsupported opcode received")

    def to_owned(self) -> OwnedMessage:
        """The owned form of this message."""
        return OwnedMessage.from_message(self)


class OwnedMessage(Frame):
    """Base of the owned message variants, which are what a receiver yields."""

    _kind: MessageType

    def is_close(self) -> bool:
        """Whether this is a close message."""
        return self._kind is MessageType.CLOSE

    def is_control(self) -> bool:
        """Whether this is a close, ping or pong message."""
        return self._kind in (MessageType.CLOSE, MessageType.PING, MessageType.PONG)

    def is_data(self) -> bool:
        """Whether this is a text or binary message."""
        return not self.is_control()

    def is_ping(self) -> bool:
        """Whether this is a ping message."""
        return self._kind is MessageType.PING

    def is_pong(self) -> bool:
        """Whether this is a pong message."""
        return self._kind is MessageType.PONG

    def is_last(self) -> bool:
        return True

    def opcode(self) -> int:
        return int(self._kind)

    def reserved(self) -> tuple[bool, bool, bool]:
        return _NO_RESERVED

    def size(self) -> int:
        return len(self.take_payload())

    def write_payload(self, socket: Any) -> None:
        _write(socket, self.take_payload())

    def serialize(self, writer: Any, masked: bool) -> None:
        """Write this message to ``writer`` as one frame."""
        self.write_to(writer, masked)

    def message_size(self, masked: bool) -> int:
        """Number of bytes this message takes on the wire."""
        return self.frame_size(masked)

    @classmethod
    def from_dataframes(cls, frames: Iterable[Frame]) -> OwnedMessage:
        """Assemble an owned message from the frames that make it up."""
        return Message.from_dataframes(frames).to_owned()

    @classmethod
    def from_message(cls, message: Message) -> OwnedMessage:
        """Convert a :class:`Message`; invalid UTF-8 text is replaced, not refused."""
        kind = message.kind
        if kind is MessageType.TEXT:
            return TextMessage(bytes(message.payload).decode("utf-8", errors="replace"))
        if kind is MessageType.CLOSE:
            if message.status_code is None:
                return CloseMessage(None)
            reason = bytes(message.payload).decode("utf-8", errors="replace")
            return CloseMessage(CloseData(message.status_code, reason))
        if kind is MessageType.BINARY:
            return BinaryMessage(bytes(message.payload))
        if kind is MessageType.PING:
            return PingMessage(bytes(message.payload))
        return PongMessage(bytes(message.payload))

    def to_message(self) -> Message:
        """Convert to a :class:`Message`."""
        match self:
            case TextMessage(text=text):
                return Message.text(text)
            case BinaryMessage(data=data):
                return Message.binary(data)
            case CloseMessage(close_data=None):
                return Message.close()
            case CloseMessage(close_data=close_data):
                return Message.close_because(close_data.status_code, close_data.reason)
            case PingMessage(data=data):
                return Message.ping(data)
            case PongMessage(data=data):
                return Message.pong(data)
        raise TypeError(f"unknown message variant {type(self).__name__}")


@dataclass(frozen=True)
class TextMessage(OwnedMessage):
    """A message holding UTF-8 text."""

    text: str
    _kind = MessageType.TEXT

    def take_payload(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class BinaryMessage(OwnedMessage):
    """A message holding binary data."""

    data: bytes
    _kind = MessageType.BINARY

    def take_payload(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True)
class CloseMessage(OwnedMessage):
    """A message closing the connection, with optional status and reason."""

    close_data: CloseData | None = None
    _kind = MessageType.CLOSE

    def take_payload(self) -> bytes:
        return self.close_data.to_bytes() if self.close_data is not None else b""


@dataclass(frozen=True)
class PingMessage(OwnedMessage):
    """A ping; usually answered by a pong with the same data."""

    data: bytes
    _kind = MessageType.PING

    def take_payload(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True)
class PongMessage(OwnedMessage):
    """A pong, usually answering a ping."""

    data: bytes
    _kind = MessageType.PONG

    def take_payload(self) -> bytes:
        return bytes(self.data)