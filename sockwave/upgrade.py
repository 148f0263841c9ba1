"""Inspecting WebSocket upgrade requests and answering them."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

from .errors import ProtocolError
from .handshake import ACCEPT, EXTENSIONS, KEY, PROTOCOL, WebSocketAccept, WebSocketKey

VERSION = "Sec-WebSocket-Version"
ORIGIN = "Origin"
UPGRADE = "Upgrade"
CONNECTION = "Connection"


class _HeaderMap(MutableMapping):
    """HTTP headers with case-insensitive names."""

    def __init__(self, items: Mapping[str, str] | Iterable[tuple[str, str]] | None = None) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        if items is not None:
            self.update(items)

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __setitem__(self, name: str, value: str) -> None:
        self._items[name.lower()] = (name, str(value))

    def __delitem__(self, name: str) -> None:
        folded = name.lower()
        if folded not in self._items:
            raise KeyError(name)
        self._items.pop(folded)

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def add(self, name: str, value: str) -> None:
        """Add a value, joining it to an existing one with a comma."""
        existing = self._items.get(name.lower())
        if existing is None:
            self[name] = value
        else:
            self._items[name.lower()] = (existing[0], f"{existing[1]}, {value}")

    def __str__(self) -> str:
        return "".join(f"{name}: {value}\r\n" for name, value in self._items.values())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


def _as_headers(headers: Any) -> _HeaderMap:
    return headers if isinstance(headers, _HeaderMap) else _HeaderMap(headers)


def _comma_list(value: str | None) -> list[str]:
    if value is None:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_key(headers: Mapping[str, str]) -> WebSocketKey | None:
    value = headers.get(KEY)
    if value is None:
        return None
    try:
        return WebSocketKey.parse(value.strip())
    except ProtocolError:
        return None


def _append_list(headers: _HeaderMap, name: str, values: list[str]) -> None:
    current = headers.get(name)
    items = _comma_list(current) if current is not None else []
    headers[name] = ", ".join(items + values)


class UpgradeErrorKind(enum.Enum):
    """Why a connection could not be upgraded."""

    METHOD_NOT_GET = "Request method must be GET"
    UNSUPPORTED_HTTP_VERSION = "Unsupported request HTTP version"
    UNSUPPORTED_WEBSOCKET_VERSION = "Unsupported WebSocket version"
    NO_SEC_WS_KEY_HEADER = "Missing Sec-WebSocket-Key header"
    NO_WS_UPGRADE_HEADER = "Invalid Upgrade WebSocket header"
    NO_UPGRADE_HEADER = "Missing Upgrade WebSocket header"
    NO_WS_CONNECTION_HEADER = "Invalid Connection WebSocket header"
    NO_CONNECTION_HEADER = "Missing Connection WebSocket header"
    IO = "I/O error"
    PARSING = "Error while parsing the request"


class UpgradeError(Exception):
    """A request could not be turned into a WebSocket connection."""

    def __init__(self, kind: UpgradeErrorKind, cause: BaseException | None = None) -> None:
        super().__init__(kind, cause)
        self.kind = kind
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None and self.kind in (UpgradeErrorKind.IO, UpgradeErrorKind.PARSING):
            return str(self.cause)
        return self.kind.value


class InvalidConnection(Exception):
    """What is left of a connection whose handshake failed.

    ``parsed`` holds the request if one was read, so the connection can
    still be served as plain HTTP.
    """

    def __init__(
        self,
        error: UpgradeError,
        stream: Any = None,
        parsed: Request | None = None,
        buffer: Any = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        self.stream = stream
        self.parsed = parsed
        self.buffer = buffer

    def __str__(self) -> str:
        return str(self.error)

    def __repr__(self) -> str:
        return (
            "InvalidConnection(stream='...', parsed='...', buffer='...', "
            f"error={self.error!r})"
        )


@dataclass
class Request:
    """An HTTP request line with its headers."""

    method: str
    uri: str
    version: str = "HTTP/1.1"
    headers: Any = field(default_factory=_HeaderMap)

    def __post_init__(self) -> None:
        self.headers = _as_headers(self.headers)


def validate(method: str, version: str, headers: Mapping[str, str]) -> None:
    """Raise :class:`UpgradeError` unless this is a valid WebSocket upgrade request."""
    headers = _as_headers(headers)

    if method != "GET":
        raise UpgradeError(UpgradeErrorKind.METHOD_NOT_GET)

    if str(version).upper() in ("HTTP/0.9", "HTTP/1.0"):
        raise UpgradeError(UpgradeErrorKind.UNSUPPORTED_HTTP_VERSION)

    ws_version = headers.get(VERSION)
    if ws_version is not None and ws_version.strip() != "13":
        raise UpgradeError(UpgradeErrorKind.UNSUPPORTED_WEBSOCKET_VERSION)

    if _parse_key(headers) is None:
        raise UpgradeError(UpgradeErrorKind.NO_SEC_WS_KEY_HEADER)

    upgrade = headers.get(UPGRADE)
    if upgrade is None:
        raise UpgradeError(UpgradeErrorKind.NO_UPGRADE_HEADER)
    names = (item.split("/", 1)[0].strip().lower() for item in _comma_list(upgrade))
    if "websocket" not in names:
        raise UpgradeError(UpgradeErrorKind.NO_WS_UPGRADE_HEADER)

    connection = headers.get(CONNECTION)
    if connection is None:
        raise UpgradeError(UpgradeErrorKind.NO_CONNECTION_HEADER)
    if not any(option.lower() == "upgrade" for option in _comma_list(connection)):
        raise UpgradeError(UpgradeErrorKind.NO_WS_CONNECTION_HEADER)


@dataclass
class WsUpgrade:
    """A half-made WebSocket session, to be examined and then accepted or rejected.

    ``headers`` are the headers of the response that will be sent.
    """

    stream: Any
    request: Request
    buffer: Any = None
    headers: Any = field(default_factory=_HeaderMap)

    def __post_init__(self) -> None:
        self.headers = _as_headers(self.headers)

    def use_protocol(self, protocol: str) -> WsUpgrade:
        """Select a protocol for the response."""
        _append_list(self.headers, PROTOCOL, [str(protocol)])
        return self

    def use_extension(self, extension: str) -> WsUpgrade:
        """Select an extension for the response."""
        _append_list(self.headers, EXTENSIONS, [str(extension)])
        return self

    def use_extensions(self, extensions: Iterable[str]) -> WsUpgrade:
        """Select several extensions for the response."""
        _append_list(self.headers, EXTENSIONS, [str(ext) for ext in extensions])
        return self

    def protocols(self) -> list[str]:
        """The protocols the client asked for."""
        return _comma_list(self.request.headers.get(PROTOCOL))

    def extensions(self) -> list[str]:
        """The extensions the client asked for."""
        return _comma_list(self.request.headers.get(EXTENSIONS))

    def key(self) -> bytes | None:
        """The 16 bytes of the client's key."""
        parsed = _parse_key(self.request.headers)
        return parsed.key if parsed is not None else None

    def version(self) -> str | None:
        """The WebSocket version the client announced."""
        value = self.request.headers.get(VERSION)
        return value.strip() if value is not None else None

    def uri(self) -> str:
        """The request URI."""
        return str(self.request.uri)

    def origin(self) -> str | None:
        """The client's origin."""
        return self.request.headers.get(ORIGIN)

    def prepare_headers(self, custom: Mapping[str, str] | None = None) -> HTTPStatus:
        """Fill in the response headers that accept the handshake.

        ``custom`` headers are added first, so required ones take precedence.
        """
        if custom:
            self.headers.update(custom)
        key = _parse_key(self.request.headers)
        if key is None:
            raise UpgradeError(UpgradeErrorKind.NO_SEC_WS_KEY_HEADER)
        self.headers[ACCEPT] = WebSocketAccept.from_key(key).serialize()
        self.headers[CONNECTION] = "Upgrade"
        self.headers[UPGRADE] = "websocket"
        return HTTPStatus.SWITCHING_PROTOCOLS

    def send(self, status: int) -> None:
        """Write a response with ``status`` and the response headers to the stream."""
        status = HTTPStatus(status)
        data = (
            f"{self.request.version} {status.value} {status.phrase}\r\n"
            f"{self.headers}\r\n"
        ).encode("latin-1")
        sendall = getattr(self.stream, "sendall", None)
        if sendall is not None:
            sendall(data)
            return
        self.stream.write(data)
        flush = getattr(self.stream, "flush", None)
        if flush is not None:
            flush()

    def reject(self, headers: Mapping[str, str] | None = None) -> Any:
        """Refuse the handshake with a 400 response and hand back the stream."""
        if headers:
            self.headers.update(headers)
        self.send(HTTPStatus.BAD_REQUEST)
        return self.stream