"""Incremental encoders and decoders for data frames and messages.

The decoders take a ``bytearray`` of received data and consume whole
frames from its front, leaving any incomplete tail in place. The encoders
append the encoded bytes to a ``bytearray``.
"""

from __future__ import annotations

import enum
import io
from typing import Any

from .dataframe import DataFrame, Opcode
from .errors import NoDataAvailable, ProtocolError
from .frameheader import read_header
from .framing import Frame
from .message import OwnedMessage

DEFAULT_MAX_DATAFRAME_SIZE = 1024 * 1024 * 100
DEFAULT_MAX_MESSAGE_SIZE = 1024 * 1024 * 200
MAX_DATAFRAMES_IN_ONE_MESSAGE = 1024 * 1024
PER_DATAFRAME_OVERHEAD = 64

_U32_MAX = 0xFFFFFFFF
_MAX_HEADER_SIZE = 14


class Context(enum.Enum):
    """The role of a codec; a server expects masked input and sends unmasked."""

    SERVER = "server"
    CLIENT = "client"


class DataFrameCodec:
    """Decodes :class:`DataFrame` objects and encodes any :class:`Frame`."""

    def __init__(
        self, context: Context, max_dataframe_size: int = DEFAULT_MAX_DATAFRAME_SIZE
    ) -> None:
        self.is_server = context is Context.SERVER
        self.max_dataframe_size = min(max_dataframe_size, _U32_MAX)

    def decode(self, src: bytearray) -> DataFrame | None:
        """Take one complete frame off the front of ``src``, or return None."""
        reader = io.BytesIO(bytes(src[:_MAX_HEADER_SIZE]))
        try:
            header = read_header(reader)
        except NoDataAvailable:
            return None
        consumed = reader.tell()

        if header.length > self.max_dataframe_size:
            raise ProtocolError("Exceeded maximum incoming DataFrame size")

        end = consumed + header.length
        if end > len(src):
            return None

        body = bytes(src[consumed:end])
        del src[:end]
        return DataFrame.read_dataframe_body(header, body, self.is_server)

    def encode(self, item: Frame, dst: bytearray) -> None:
        """Append ``item`` as a frame to ``dst``; clients mask what they send."""
        out = io.BytesIO()
        item.write_to(out, not self.is_server)
        dst += out.getvalue()


class MessageCodec:
    """Decodes :class:`OwnedMessage` objects and encodes any message."""

    def __init__(
        self,
        context: Context,
        max_dataframe_size: int = DEFAULT_MAX_DATAFRAME_SIZE,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
    ) -> None:
        self._frames: list[DataFrame] = []
        self._dataframe_codec = DataFrameCodec(context, max_dataframe_size)
        self.max_message_size = min(max_message_size, _U32_MAX)

    @property
    def is_server(self) -> bool:
        """Whether the codec acts as the server side."""
        return self._dataframe_codec.is_server

    def decode(self, src: bytearray) -> OwnedMessage | None:
        """Take one complete message off the front of ``src``, or return None.

        Control frames are returned as soon as they arrive, even between
        the fragments of a data message.
        """
        current_length = sum(len(frame.data) for frame in self._frames)
        while (frame := self._dataframe_codec.decode(src)) is not None:
            is_first = not self._frames
            opcode = frame.opcode()

            if opcode == Opcode.CONTINUATION and is_first:
                raise ProtocolError("Unexpected continuation data frame opcode")
            if opcode >= Opcode.CLOSE:
                return OwnedMessage.from_dataframes([frame])
            if opcode != Opcode.CONTINUATION and not is_first:
                raise ProtocolError("Unexpected data frame opcode")

            current_length += len(frame.data) + PER_DATAFRAME_OVERHEAD
            self._frames.append(frame)

            if frame.finished:
                frames, self._frames = self._frames, []
                return OwnedMessage.from_dataframes(frames)
            if len(self._frames) >= MAX_DATAFRAMES_IN_ONE_MESSAGE:
                raise ProtocolError(
                    "Exceeded count of data frames in one WebSocket message"
                )
            if current_length > self.max_message_size:
                raise ProtocolError("Exceeded maximum WebSocket message size")
        return None

    def encode(self, item: Any, dst: bytearray) -> None:
        """Append the serialized message ``item`` to ``dst``."""
        out = io.BytesIO()
        item.serialize(out, not self.is_server)
        dst += out.getvalue()