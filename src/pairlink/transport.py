"""
Dual-channel message transport between paired peers.

Every send goes out on two channels. The durable channel enqueues the
encrypted message on the pairing's send queue and is the call's result. The
notification channel pokes the peer's push endpoint so it wakes up and reads
sooner; it runs in a detached task, and its failures are only logged.
"""

from abc import ABC, abstractmethod
from typing import Optional
import asyncio
import logging

from .backends import (
    InMemoryPushBackend,
    InMemoryQueueBackend,
    PushBackend,
    QueueBackend,
)
from .encoding import decode_ciphertext, encode_ciphertext
from .notifier import Notifier
from .pairing import PairingContext
from .skew import notify_if_clock_skew
from .types import DecodingError, TransportConfig

logger = logging.getLogger("pairlink.transport")


class Transport(ABC):
    """Abstract base class for delivering encrypted messages to the paired peer."""

    @abstractmethod
    async def setup(self, context: PairingContext) -> None:
        """Ensure the pairing's send and receive queues exist."""
        pass

    @abstractmethod
    async def push_alert(self, context: PairingContext, alert_text: str, message: bytes) -> None:
        """Send a message and announce it with a user-visible alert."""
        pass

    @abstractmethod
    async def send_message(self, context: PairingContext, message: bytes) -> None:
        """Send a message and announce it silently."""
        pass

    @abstractmethod
    async def read(self, notifier: Optional[Notifier], context: PairingContext) -> list[bytes]:
        """Receive one batch of ciphertexts from the peer."""
        pass


class QueueTransport(Transport):
    """
    Transport over a durable queue backend with push notifications.

    Example usage:
        ```python
        transport = QueueTransport(queue_backend, push_backend)
        await transport.setup(context)

        await transport.push_alert(context, "Approve login?", request_bytes)

        for ciphertext in await transport.read(notifier, context):
            handle(context.decrypt(ciphertext))
        ```
    """

    def __init__(
        self,
        queue_backend: QueueBackend,
        push_backend: PushBackend,
        config: Optional[TransportConfig] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            queue_backend: Durable queue service.
            push_backend: Push notification service.
            config: Transport configuration (default: push enabled).
        """
        self.queue_backend = queue_backend
        self.push_backend = push_backend
        self.config = config or TransportConfig()
        # Strong references so detached pushes are not garbage collected mid-flight
        self._push_tasks: set[asyncio.Task] = set()

    async def setup(self, context: PairingContext) -> None:
        """
        Create the send and receive queues, send first.

        Stops at the first failure; a queue already created stays created.

        Raises:
            ProvisioningError: If the backend cannot create a queue.
        """
        for name in (context.send_queue_name, context.recv_queue_name):
            url = await self.queue_backend.create_queue(name)
            logger.debug("Queue ready: %s", url)

    async def push_alert(self, context: PairingContext, alert_text: str, message: bytes) -> None:
        """
        Send a message and announce it with alert text on the peer's device.

        Raises:
            EncryptionError: If the message cannot be encrypted. Nothing is sent.
            DeliveryError: If the enqueue fails.
        """
        await self._send(context, message, alert_text)

    async def send_message(self, context: PairingContext, message: bytes) -> None:
        """
        Send a message and announce it with a silent push.

        Raises:
            EncryptionError: If the message cannot be encrypted. Nothing is sent.
            DeliveryError: If the enqueue fails.
        """
        await self._send(context, message, None)

    async def read(self, notifier: Optional[Notifier], context: PairingContext) -> list[bytes]:
        """
        Receive and delete one batch from the receive queue.

        Entries that are not valid base64 are logged and dropped; the rest are
        returned in backend order. Backend errors are checked for clock skew,
        reported through the notifier if so, and re-raised unchanged.

        Args:
            notifier: Sink for the clock skew diagnostic, or None.
            context: The pairing to read for.

        Returns:
            Decoded ciphertexts.
        """
        queue_name = context.recv_queue_name
        try:
            entries = await self.queue_backend.receive_and_delete(queue_name)
        except Exception as e:
            notify_if_clock_skew(e, notifier, self.config)
            raise

        ciphertexts = []
        for entry in entries:
            try:
                ciphertexts.append(decode_ciphertext(entry))
            except DecodingError:
                logger.error("base64 ciphertext decoding error on queue %s", queue_name)
                continue

        logger.debug("Read %d of %d entries from %s", len(ciphertexts), len(entries), queue_name)
        return ciphertexts

    async def _send(self, context: PairingContext, message: bytes, alert_text: Optional[str]) -> None:
        ciphertext = context.encrypt(message)
        payload = encode_ciphertext(ciphertext)
        queue_name = context.send_queue_name

        if self.config.push_enabled:
            self._spawn_push(context, payload, queue_name, alert_text)

        await self.queue_backend.send(queue_name, payload)

    def _spawn_push(
        self,
        context: PairingContext,
        payload: str,
        queue_name: str,
        alert_text: Optional[str],
    ) -> None:
        task = asyncio.create_task(self._push(context, payload, queue_name, alert_text))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

    async def _push(
        self,
        context: PairingContext,
        payload: str,
        queue_name: str,
        alert_text: Optional[str],
    ) -> None:
        try:
            endpoint = context.current_push_endpoint()
            if endpoint is None:
                return

            if alert_text is None:
                await self.push_backend.push(payload, endpoint, queue_name)
            else:
                await self.push_backend.push_alert(alert_text, payload, endpoint, queue_name)
        except Exception as e:
            logger.error("Push error: %s", e)


class LoopbackTransport(QueueTransport):
    """
    QueueTransport over fresh in-memory backends.

    Both peers of a pairing can share one instance: what one side sends
    lands in the other side's receive queue.
    """

    def __init__(self, config: Optional[TransportConfig] = None) -> None:
        self.queues = InMemoryQueueBackend()
        self.pushes = InMemoryPushBackend()
        super().__init__(self.queues, self.pushes, config)
