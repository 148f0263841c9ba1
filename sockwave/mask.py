"""Masking of data frame payloads."""

from __future__ import annotations

import os
from typing import Any


class Masker:
    """Writable wrapper that masks everything written through it."""

    def __init__(self, key: bytes, endpoint: Any) -> None:
        self._key = bytes(key)
        self._pos = 0
        self._end = endpoint

    def write(self, data: bytes) -> Any:
        """Mask ``data`` with the running key position and pass it on."""
        data = bytes(data)
        rotated = self._key[self._pos:] + self._key[: self._pos]
        self._pos = (self._pos + len(data)) % len(self._key)
        return self._end.write(mask_data(rotated, data))

    def flush(self) -> None:
        """Flush the endpoint."""
        self._end.flush()


def gen_mask() -> bytes:
    """Generate a random four-byte masking key."""
    return os.urandom(4)


def mask_data(mask: bytes, data: bytes) -> bytes:
    """XOR ``data`` with the repeated ``mask``; applying it twice undoes it."""
    data = bytes(data)
    if not data:
        return b""
    mask = bytes(mask)
    repeats, rest = divmod(len(data), len(mask))
    key = mask * repeats + mask[:rest]
    value = int.from_bytes(data, "big") ^ int.from_bytes(key, "big")
    return value.to_bytes(len(data), "big")