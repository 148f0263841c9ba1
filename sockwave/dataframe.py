"""The default data frame, which owns its whole payload."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from .errors import DataFrameError, NoDataAvailable, WebSocketIOError, io_error
from .frameheader import DataFrameFlags, DataFrameHeader, read_header
from .framing import Frame
from .mask import mask_data


class Opcode(enum.IntEnum):
    """A data frame opcode."""

    CONTINUATION = 0
    TEXT = 1
    BINARY = 2
    NON_CONTROL_1 = 3
    NON_CONTROL_2 = 4
    NON_CONTROL_3 = 5
    NON_CONTROL_4 = 6
    NON_CONTROL_5 = 7
    CLOSE = 8
    PING = 9
    PONG = 10
    CONTROL_1 = 11
    CONTROL_2 = 12
    CONTROL_3 = 13
    CONTROL_4 = 14
    CONTROL_5 = 15


def _read_up_to(reader: Any, count: int) -> bytes:
    chunks = []
    remaining = count
    while remaining:
        try:
            chunk = reader.read(remaining)
        except OSError as err:
            raise io_error(err) from err
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


@dataclass
class DataFrame(Frame):
    """A WebSocket data frame; the payload held here is never masked."""

    finished: bool
    kind: Opcode
    data: bytes
    reserved_bits: tuple[bool, bool, bool] = field(default=(False, False, False))

    @classmethod
    def read_dataframe_body(
        cls, header: DataFrameHeader, body: bytes, should_be_masked: bool
    ) -> DataFrame:
        """Combine a header and its payload into a frame, unmasking as needed."""
        finished = bool(header.flags & DataFrameFlags.FIN)
        reserved = (
            bool(header.flags & DataFrameFlags.RSV1),
            bool(header.flags & DataFrameFlags.RSV2),
            bool(header.flags & DataFrameFlags.RSV3),
        )
        kind = Opcode(header.opcode)

        if header.mask is not None:
            if not should_be_masked:
                raise DataFrameError("Expected unmasked data frame")
            data = mask_data(header.mask, body)
        else:
            if should_be_masked:
                raise DataFrameError("Expected masked data frame")
            data = bytes(body)

        return cls(finished=finished, kind=kind, data=data, reserved_bits=reserved)

    @classmethod
    def read_dataframe(cls, reader: Any, should_be_masked: bool) -> DataFrame:
        """Read one frame from ``reader``."""
        header = read_header(reader)
        return cls._read_body(reader, header, should_be_masked)

    @classmethod
    def read_dataframe_with_limit(
        cls, reader: Any, should_be_masked: bool, limit: int
    ) -> DataFrame:
        """Read one frame, refusing one whose declared length exceeds ``limit``."""
        header = read_header(reader)
        if header.length > limit:
            raise WebSocketIOError(OSError("exceeded DataFrame length limit"))
        return cls._read_body(reader, header, should_be_masked)

    @classmethod
    def _read_body(
        cls, reader: Any, header: DataFrameHeader, should_be_masked: bool
    ) -> DataFrame:
        data = _read_up_to(reader, header.length)
        if len(data) < header.length:
            raise NoDataAvailable()
        return cls.read_dataframe_body(header, data, should_be_masked)

    def is_last(self) -> bool:
        return self.finished

    def opcode(self) -> int:
        return int(self.kind)

    def reserved(self) -> tuple[bool, bool, bool]:
        return self.reserved_bits

    def size(self) -> int:
        return len(self.data)

    def write_payload(self, socket: Any) -> None:
        try:
            socket.write(self.data)
        except OSError as err:
            raise io_error(err) from err

    def take_payload(self) -> bytes:
        return self.data