"""Reading and writing of data frame headers."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any

from .errors import DataFrameError, NoDataAvailable, ProtocolError, io_error


class DataFrameFlags(enum.IntFlag):
    """Flags in the first byte of a data frame."""

    FIN = 0x80
    RSV1 = 0x40
    RSV2 = 0x20
    RSV3 = 0x10


@dataclass(frozen=True)
class DataFrameHeader:
    """A data frame header."""

    flags: DataFrameFlags
    opcode: int
    mask: bytes | None
    length: int


def _write(writer: Any, data: bytes) -> None:
    try:
        writer.write(data)
    except OSError as err:
        raise io_error(err) from err


def _read_exact(reader: Any, count: int) -> bytes:
    chunks = []
    remaining = count
    while remaining:
        try:
            chunk = reader.read(remaining)
        except OSError as err:
            raise io_error(err) from err
        if not chunk:
            raise NoDataAvailable()
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def write_header(writer: Any, header: DataFrameHeader) -> None:
    """Write ``header`` to ``writer``."""
    if header.opcode > 0xF:
        raise DataFrameError("Invalid data frame opcode")
    if header.opcode >= 8 and header.length >= 126:
        raise DataFrameError("Control frame length too long")

    out = bytearray()
    out.append(int(header.flags) | header.opcode)

    mask_bit = 0x80 if header.mask is not None else 0x00
    if header.length <= 125:
        out.append(mask_bit | header.length)
    elif header.length <= 65535:
        out.append(mask_bit | 126)
        out += struct.pack(">H", header.length)
    else:
        out.append(mask_bit | 127)
        out += struct.pack(">Q", header.length)

    if header.mask is not None:
        out += bytes(header.mask)

    _write(writer, bytes(out))


def read_header(reader: Any) -> DataFrameHeader:
    """Read a data frame header from ``reader``."""
    byte0, byte1 = _read_exact(reader, 2)

    flags = DataFrameFlags(byte0 & 0xF0)
    opcode = byte0 & 0x0F

    short_len = byte1 & 0x7F
    if short_len == 126:
        (length,) = struct.unpack(">H", _read_exact(reader, 2))
        if length <= 125:
            raise DataFrameError("Invalid data frame length")
    elif short_len == 127:
        (length,) = struct.unpack(">Q", _read_exact(reader, 8))
        if length <= 65535:
            raise DataFrameError("Invalid data frame length")
    else:
        length = short_len

    if opcode >= 8:
        if length >= 126:
            raise DataFrameError("Control frame length too long")
        if not flags & DataFrameFlags.FIN:
            raise ProtocolError("Illegal fragmented control frame")

    mask = _read_exact(reader, 4) if byte1 & 0x80 else None

    return DataFrameHeader(flags=flags, opcode=opcode, mask=mask, length=length)