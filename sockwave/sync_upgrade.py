"""Reading a WebSocket upgrade request from a blocking stream."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .upgrade import (
    InvalidConnection,
    Request,
    UpgradeError,
    UpgradeErrorKind,
    WsUpgrade,
    _HeaderMap,
    validate,
)

MAX_BUFFER_SIZE = 8192 + 4096 * 100
MAX_HEADERS = 100
_CHUNK_SIZE = 4096

_NAME_PATTERN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_REQUEST_LINE = re.compile(rf"({_NAME_PATTERN}) (\S+) (HTTP/\d\.\d)")
_HEADER_NAME = re.compile(_NAME_PATTERN)


@dataclass
class Buffer:
    """Bytes already read from a stream while reading the handshake.

    ``buf[pos:cap]`` is the data that has been read but not yet consumed.
    """

    buf: bytes
    pos: int
    cap: int

    @property
    def unread(self) -> bytes:
        """The bytes that follow what has already been parsed."""
        return self.buf[self.pos : self.cap]


class _HeadError(Exception):
    """A failed attempt to read a request, with whatever was read."""

    def __init__(self, error: UpgradeError, buffer: Buffer) -> None:
        super().__init__(error)
        self.error = error
        self.buffer = buffer


def _read_chunk(reader: Any) -> bytes:
    recv = getattr(reader, "recv", None)
    if recv is not None:
        return recv(_CHUNK_SIZE)
    read1 = getattr(reader, "read1", None)
    if read1 is not None:
        return read1(_CHUNK_SIZE)
    return reader.read(_CHUNK_SIZE)


def _head_end(data: bytes | bytearray) -> int | None:
    start = len(data) - len(bytes(data).lstrip(b"\r\n"))
    if start == len(data):
        return None
    ends = [
        index + len(terminator)
        for terminator in (b"\r\n\r\n", b"\n\n")
        if (index := data.find(terminator, start)) != -1
    ]
    return min(ends) if ends else None


def _parsing_error(message: str) -> UpgradeError:
    return UpgradeError(UpgradeErrorKind.PARSING, ValueError(message))


def _parse_head(head: bytes) -> Request:
    text = head.decode("latin-1").lstrip("\r\n").replace("\r\n", "\n")
    request_line, *header_lines = text.split("\n")

    match = _REQUEST_LINE.fullmatch(request_line)
    if match is None:
        raise _parsing_error("invalid request line")
    method, uri, version = match.groups()

    headers = _HeaderMap()
    count = 0
    for line in header_lines:
        if not line:
            continue
        if line[0] in " \t":
            raise _parsing_error("folded header lines are not supported")
        name, sep, value = line.partition(":")
        if not sep or _HEADER_NAME.fullmatch(name) is None:
            raise _parsing_error("invalid header line")
        count += 1
        if count > MAX_HEADERS:
            raise _parsing_error("too many headers")
        headers.add(name, value.strip(" \t\r"))

    return Request(method=method, uri=uri, version=version, headers=headers)


def _parse_request(reader: Any) -> tuple[Request, Buffer]:
    data = bytearray()
    while (end := _head_end(data)) is None:
        if len(data) >= MAX_BUFFER_SIZE:
            raise _HeadError(
                _parsing_error("request head too large"),
                Buffer(bytes(data), 0, len(data)),
            )
        try:
            chunk = _read_chunk(reader)
        except OSError as err:
            raise _HeadError(
                UpgradeError(UpgradeErrorKind.IO, err),
                Buffer(bytes(data), 0, len(data)),
            ) from err
        if not chunk:
            raise _HeadError(
                UpgradeError(
                    UpgradeErrorKind.IO,
                    EOFError("connection closed before the request was complete"),
                ),
                Buffer(bytes(data), 0, len(data)),
            )
        data += chunk

    raw = bytes(data)
    try:
        request = _parse_head(raw[:end])
    except UpgradeError as err:
        raise _HeadError(err, Buffer(raw, 0, len(raw))) from None
    return request, Buffer(raw, end, len(raw))


def parse_request(reader: Any) -> tuple[Request, Buffer]:
    """Read and parse an HTTP request head from ``reader``.

    Returns the request and the buffer of everything read, positioned just
    after the head. Raises :class:`UpgradeError` if reading or parsing fails.
    """
    try:
        return _parse_request(reader)
    except _HeadError as failure:
        raise failure.error from None


def into_ws(stream: Any) -> WsUpgrade:
    """Read a WebSocket handshake from ``stream`` and return the pending upgrade.

    Raises :class:`InvalidConnection` carrying the stream, the parsed request
    (if any) and the buffered data when the handshake cannot be used.
    """
    try:
        request, buffer = _parse_request(stream)
    except _HeadError as failure:
        raise InvalidConnection(
            failure.error, stream=stream, buffer=failure.buffer
        ) from failure.error

    try:
        validate(request.method, request.version, request.headers)
    except UpgradeError as err:
        raise InvalidConnection(
            err, stream=stream, parsed=request, buffer=buffer
        ) from err

    return WsUpgrade(stream=stream, request=request, buffer=buffer)


@dataclass
class RequestStreamPair:
    """A stream together with a request that was already read from it."""

    stream: Any
    request: Request

    def into_ws(self) -> WsUpgrade:
        """Validate the request and return the pending upgrade."""
        try:
            validate(self.request.method, self.request.version, self.request.headers)
        except UpgradeError as err:
            raise InvalidConnection(
                err, stream=self.stream, parsed=self.request
            ) from err
        return WsUpgrade(stream=self.stream, request=self.request, buffer=None)