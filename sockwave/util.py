"""Small helpers shared by the WebSocket modules."""

from __future__ import annotations

from .errors import Utf8Error


def bytes_to_string(data: bytes) -> str:
    """Decode UTF-8 ``data``, raising :class:`Utf8Error` if it is invalid."""
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as err:
        raise Utf8Error(err) from err