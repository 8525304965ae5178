"""
Backend interfaces for the cloud relay.

This module provides abstract base classes for the durable message queue and
the push notification service the transport sits on. Implementations can use
any cloud SDK; in-memory implementations are provided for tests and local
development.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import asyncio
import logging

from .types import (
    MAX_RECEIVE_BATCH,
    BackendReceiveError,
    DeliveryError,
    ProvisioningError,
    PushNotificationError,
)

logger = logging.getLogger("pairlink.backends")


# ============================================================================
# Queue Backend
# ============================================================================


class QueueBackend(ABC):
    """Abstract base class for a durable, named message queue service."""

    @abstractmethod
    async def create_queue(self, name: str) -> str:
        """
        Create a queue, returning its URL or handle.

        Creating an existing queue must succeed.

        Raises:
            ProvisioningError: If the queue cannot be created.
        """
        pass

    @abstractmethod
    async def send(self, name: str, payload: str) -> None:
        """
        Enqueue a textual payload.

        Raises:
            DeliveryError: If the payload was not durably stored.
        """
        pass

    @abstractmethod
    async def receive_and_delete(self, name: str) -> list[str]:
        """
        Receive one batch of payloads and delete them from the queue.

        Raises:
            BackendReceiveError: If the receive call fails.
        """
        pass


class InMemoryQueueBackend(QueueBackend):
    """In-memory implementation of QueueBackend."""

    def __init__(self, max_batch_size: int = MAX_RECEIVE_BATCH) -> None:
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
        self.max_batch_size = max_batch_size
        self._queues: dict[str, list[str]] = {}
        self._lock = asyncio.Lock()

    async def create_queue(self, name: str) -> str:
        if not name:
            raise ProvisioningError("Queue name must not be empty")
        async with self._lock:
            self._queues.setdefault(name, [])
        return f"memory://{name}"

    async def send(self, name: str, payload: str) -> None:
        async with self._lock:
            queue = self._queues.get(name)
            if queue is None:
                raise DeliveryError(f"Queue does not exist: {name}")
            queue.append(payload)

    async def receive_and_delete(self, name: str) -> list[str]:
        async with self._lock:
            queue = self._queues.get(name)
            if queue is None:
                raise BackendReceiveError(f"Queue does not exist: {name}")
            batch = queue[: self.max_batch_size]
            del queue[: self.max_batch_size]
            return batch

    def queue_names(self) -> list[str]:
        """Names of all created queues."""
        return list(self._queues.keys())

    def pending(self, name: str) -> list[str]:
        """Payloads still waiting in a queue, oldest first."""
        return list(self._queues.get(name, []))


# ============================================================================
# Push Backend
# ============================================================================


class PushBackend(ABC):
    """Abstract base class for a best-effort push notification service."""

    @abstractmethod
    async def push(self, payload: str, endpoint: str, queue_name: str) -> None:
        """
        Send a silent notification carrying a payload.

        Args:
            payload: Transit-encoded ciphertext.
            endpoint: Registered push endpoint handle of the peer.
            queue_name: Queue the payload was enqueued on.

        Raises:
            PushNotificationError: If the notification was not accepted.
        """
        pass

    @abstractmethod
    async def push_alert(
        self,
        alert_text: str,
        payload: str,
        endpoint: str,
        queue_name: str,
    ) -> None:
        """
        Send a user-visible notification carrying alert text and a payload.

        Raises:
            PushNotificationError: If the notification was not accepted.
        """
        pass


@dataclass
class PushRecord:
    """A push attempt recorded by InMemoryPushBackend."""

    endpoint: str
    """Endpoint the notification was addressed to."""

    queue_name: str
    """Queue the payload was enqueued on."""

    payload: str
    """Transit-encoded ciphertext."""

    alert_text: Optional[str] = None
    """Alert text, or None for silent pushes."""

    @property
    def is_alert(self) -> bool:
        """Whether this push carried alert text."""
        return self.alert_text is not None


class InMemoryPushBackend(PushBackend):
    """In-memory implementation of PushBackend that records every push."""

    def __init__(self) -> None:
        self.records: list[PushRecord] = []

    async def push(self, payload: str, endpoint: str, queue_name: str) -> None:
        self._record(PushRecord(endpoint=endpoint, queue_name=queue_name, payload=payload))

    async def push_alert(
        self,
        alert_text: str,
        payload: str,
        endpoint: str,
        queue_name: str,
    ) -> None:
        self._record(
            PushRecord(
                endpoint=endpoint,
                queue_name=queue_name,
                payload=payload,
                alert_text=alert_text,
            )
        )

    def _record(self, record: PushRecord) -> None:
        if not record.endpoint:
            raise PushNotificationError("Push endpoint must not be empty")
        logger.debug("Recorded push to %s for queue %s", record.endpoint, record.queue_name)
        self.records.append(record)
