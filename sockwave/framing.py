"""The common interface shared by every kind of data frame."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Any

from .errors import io_error
from .frameheader import DataFrameFlags, DataFrameHeader, write_header
from .mask import Masker, gen_mask


class Frame(ABC):
    """Something that can be written to the wire as one data frame."""

    @abstractmethod
    def is_last(self) -> bool:
        """Whether this is the final frame of a message."""

    @abstractmethod
    def opcode(self) -> int:
        """The opcode of this frame."""

    @abstractmethod
    def reserved(self) -> tuple[bool, bool, bool]:
        """The three reserved bits."""

    @abstractmethod
    def size(self) -> int:
        """Length of the payload in bytes."""

    @abstractmethod
    def write_payload(self, socket: Any) -> None:
        """Write the payload to ``socket``."""

    @abstractmethod
    def take_payload(self) -> bytes:
        """Return the payload as bytes."""

    def frame_size(self, masked: bool) -> int:
        """Size of the whole frame, header and payload."""
        size = self.size()
        if size <= 125:
            length_bytes = 1
        elif size <= 65535:
            length_bytes = 3
        else:
            length_bytes = 9
        return 1 + length_bytes + (4 if masked else 0) + size

    def write_to(self, writer: Any, mask: bool) -> None:
        """Write the frame to ``writer``, masking it with a fresh key if asked."""
        flags = DataFrameFlags(0)
        if self.is_last():
            flags |= DataFrameFlags.FIN
        for bit, flag in zip(
            self.reserved(),
            (DataFrameFlags.RSV1, DataFrameFlags.RSV2, DataFrameFlags.RSV3),
        ):
            if bit:
                flags |= flag

        masking_key = gen_mask() if mask else None
        header = DataFrameHeader(
            flags=flags, opcode=self.opcode(), mask=masking_key, length=self.size()
        )

        buffer = io.BytesIO()
        write_header(buffer, header)
        if masking_key is not None:
            self.write_payload(Masker(masking_key, buffer))
        else:
            self.write_payload(buffer)

        try:
            writer.write(buffer.getvalue())
        except OSError as err:
            raise io_error(err) from err