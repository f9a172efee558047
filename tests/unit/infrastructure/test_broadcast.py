"""Tests for the per-key broadcaster."""

import pytest

from agentchat.infrastructure.stores.broadcast import Broadcaster


class TestBroadcaster:
    @pytest.mark.asyncio
    async def test_initial_value_then_published_values(self):
        broadcaster: Broadcaster[int] = Broadcaster()
        subscription = broadcaster.subscribe("a", 0)

        broadcaster.publish("a", 1)
        broadcaster.publish("a", 2)

        assert [await subscription.next() for _ in range(3)] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_publish_reaches_only_matching_key(self):
        broadcaster: Broadcaster[str] = Broadcaster()
        first = broadcaster.subscribe("a", "init")
        second = broadcaster.subscribe("b", "init")

        assert broadcaster.publish("a", "hello") == 1

        assert first.pending() == 2
        assert second.pending() == 1

    def test_publish_without_subscribers(self):
        broadcaster: Broadcaster[str] = Broadcaster()

        assert broadcaster.publish("nobody", "x") == 0

    @pytest.mark.asyncio
    async def test_close_stops_iteration_and_unregisters(self):
        broadcaster: Broadcaster[int] = Broadcaster()
        subscription = broadcaster.subscribe("a", 0)

        subscription.close()
        broadcaster.publish("a", 1)

        assert broadcaster.subscriber_count("a") == 0
        assert await subscription.next() == 0
        with pytest.raises(StopAsyncIteration):
            await subscription.next()

    @pytest.mark.asyncio
    async def test_async_iteration_and_context_manager(self):
        broadcaster: Broadcaster[int] = Broadcaster()

        async with broadcaster.subscribe("a", 0) as subscription:
            broadcaster.publish("a", 1)
            received = []
            async for value in subscription:
                received.append(value)
                if value == 1:
                    break

        assert received == [0, 1]
        assert broadcaster.subscriber_count("a") == 0

    def test_close_is_idempotent(self):
        broadcaster: Broadcaster[int] = Broadcaster()
        subscription = broadcaster.subscribe("a", 0)

        subscription.close()
        subscription.close()

        assert subscription.closed
