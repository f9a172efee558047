"""Per-key publish/subscribe fan-out backed by asyncio queues."""

import asyncio
from collections import defaultdict
from collections.abc import Hashable
from typing import Generic, TypeVar

from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """Live view of one key.

    Yields the value current at subscription time, then every value
    published for the same key, in publish order, until ``close()``.
    """

    def __init__(self, broadcaster: "Broadcaster[T]", key: Hashable, initial: T) -> None:
        self._broadcaster = broadcaster
        self.key = key
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._queue.put_nowait(initial)
        self.closed = False

    def _push(self, value: T) -> None:
        if not self.closed:
            self._queue.put_nowait(value)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._broadcaster._unregister(self)
        self._queue.put_nowait(_CLOSED)

    def pending(self) -> int:
        """Number of values delivered but not yet consumed."""
        return self._queue.qsize()

    async def next(self) -> T:
        """Wait for the next value; raises StopAsyncIteration once closed."""
        value = await self._queue.get()
        if value is _CLOSED:
            raise StopAsyncIteration
        return value  # type: ignore[return-value]

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        return await self.next()

    async def __aenter__(self) -> "Subscription[T]":
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()


class Broadcaster(Generic[T]):
    """Registered subscriptions per key; publishing reaches that key only."""

    def __init__(self, name: str = "broadcast") -> None:
        self.name = name
        self._subscribers: dict[Hashable, list[Subscription[T]]] = defaultdict(list)

    def subscribe(self, key: Hashable, initial: T) -> Subscription[T]:
        subscription = Subscription(self, key, initial)
        self._subscribers[key].append(subscription)
        logger.debug(
            "Subscriber registered",
            extra={"broadcaster": self.name, "key": str(key)},
        )
        return subscription

    def publish(self, key: Hashable, value: T) -> int:
        """Deliver ``value`` to every subscriber of ``key``.

        Returns:
            Number of subscribers notified
        """
        subscribers = list(self._subscribers.get(key, ()))
        for subscription in subscribers:
            subscription._push(value)
        return len(subscribers)

    def subscriber_count(self, key: Hashable) -> int:
        return len(self._subscribers.get(key, ()))

    def _unregister(self, subscription: Subscription[T]) -> None:
        subscribers = self._subscribers.get(subscription.key)
        if not subscribers:
            return
        if subscription in subscribers:
            subscribers.remove(subscription)
        if not subscribers:
            del self._subscribers[subscription.key]
