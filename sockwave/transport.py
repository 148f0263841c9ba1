"""Interfaces for sending and receiving frames and messages over streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator

from .framing import Frame
from .message import OwnedMessage


class Receiver(ABC):
    """Reads data frames and messages from a readable stream.

    Messages are assembled with the ``from_dataframes`` class method of
    :attr:`message_type`.
    """

    message_type: ClassVar[Any] = OwnedMessage

    @abstractmethod
    def recv_dataframe(self, reader: Any) -> Frame:
        """Read one data frame from ``reader``."""

    @abstractmethod
    def recv_message_dataframes(self, reader: Any) -> list[Frame]:
        """Read the data frames that make up one message."""

    def incoming_dataframes(self, reader: Any) -> Iterator[Frame]:
        """Yield data frames from ``reader`` until reading one fails."""
        while True:
            yield self.recv_dataframe(reader)

    def recv_message(self, reader: Any) -> Any:
        """Read one whole message from ``reader``."""
        return self.message_type.from_dataframes(self.recv_message_dataframes(reader))

    def incoming_messages(self, reader: Any) -> Iterator[Any]:
        """Yield messages from ``reader`` until reading one fails."""
        while True:
            yield self.recv_message(reader)


class Sender(ABC):
    """Writes data frames and messages to a writable stream."""

    @abstractmethod
    def is_masked(self) -> bool:
        """Whether what is sent should be masked."""

    def send_dataframe(self, writer: Any, dataframe: Frame) -> None:
        """Write one data frame to ``writer``."""
        dataframe.write_to(writer, self.is_masked())

    def send_message(self, writer: Any, message: Any) -> None:
        """Write one message to ``writer``."""
        message.serialize(writer, self.is_masked())