"""Tests for the in-memory backends."""

import pytest
from pairlink.backends import InMemoryQueueBackend, InMemoryPushBackend
from pairlink.types import (
    BackendReceiveError,
    DeliveryError,
    ProvisioningError,
    PushNotificationError,
)


class TestInMemoryQueueBackend:
    """Test InMemoryQueueBackend."""

    @pytest.mark.asyncio
    async def test_create_is_idempotent(self) -> None:
        """Creating an existing queue keeps its contents."""
        backend = InMemoryQueueBackend()

        first = await backend.create_queue("q")
        await backend.send("q", "a")
        second = await backend.create_queue("q")

        assert first == second == "memory://q"
        assert backend.pending("q") == ["a"]

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self) -> None:
        """An empty queue name cannot be provisioned."""
        with pytest.raises(ProvisioningError):
            await InMemoryQueueBackend().create_queue("")

    @pytest.mark.asyncio
    async def test_send_to_missing_queue(self) -> None:
        """Enqueueing to an unknown queue is a delivery error."""
        with pytest.raises(DeliveryError, match="does not exist"):
            await InMemoryQueueBackend().send("missing", "a")

    @pytest.mark.asyncio
    async def test_receive_from_missing_queue(self) -> None:
        """Receiving from an unknown queue is a backend receive error."""
        with pytest.raises(BackendReceiveError, match="does not exist"):
            await InMemoryQueueBackend().receive_and_delete("missing")

    @pytest.mark.asyncio
    async def test_receive_deletes_in_batches(self) -> None:
        """Each receive removes at most one batch, oldest first."""
        backend = InMemoryQueueBackend(max_batch_size=2)
        await backend.create_queue("q")
        for payload in ("a", "b", "c"):
            await backend.send("q", payload)

        assert await backend.receive_and_delete("q") == ["a", "b"]
        assert await backend.receive_and_delete("q") == ["c"]
        assert await backend.receive_and_delete("q") == []

    def test_invalid_batch_size(self) -> None:
        """Batch size must be positive."""
        with pytest.raises(ValueError):
            InMemoryQueueBackend(max_batch_size=0)


class TestInMemoryPushBackend:
    """Test InMemoryPushBackend."""

    @pytest.mark.asyncio
    async def test_records_silent_and_alert(self) -> None:
        """Silent and alert pushes are both recorded."""
        backend = InMemoryPushBackend()

        await backend.push("cGF5bG9hZA==", "endpoint", "q")
        await backend.push_alert("Approve?", "cGF5bG9hZA==", "endpoint", "q")

        silent, alert = backend.records
        assert not silent.is_alert
        assert alert.is_alert
        assert alert.alert_text == "Approve?"
        assert alert.queue_name == "q"

    @pytest.mark.asyncio
    async def test_empty_endpoint_rejected(self) -> None:
        """A push to an empty endpoint fails and is not recorded."""
        backend = InMemoryPushBackend()

        with pytest.raises(PushNotificationError):
            await backend.push("cGF5bG9hZA==", "", "q")
        assert backend.records == []
