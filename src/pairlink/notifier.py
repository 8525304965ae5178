"""Notifier interface for user-facing diagnostics."""

from abc import ABC, abstractmethod
from typing import BinaryIO
import logging

logger = logging.getLogger("pairlink.notifier")


class Notifier(ABC):
    """Caller-supplied sink for human-readable messages to the local user."""

    @abstractmethod
    def notify(self, message: bytes) -> None:
        """Deliver a message. Must not raise."""
        ...


class StreamNotifier(Notifier):
    """Writes messages to a binary stream such as a terminal or socket."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def notify(self, message: bytes) -> None:
        try:
            self._stream.write(message)
            self._stream.flush()
        except (OSError, ValueError) as e:
            logger.warning("Failed to write notification: %s", e)


class CollectingNotifier(Notifier):
    """Keeps messages in memory (for testing)."""

    def __init__(self) -> None:
        self.messages: list[bytes] = []

    def notify(self, message: bytes) -> None:
        self.messages.append(message)
