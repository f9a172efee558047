"""Protocol timeline store: append-only step sequences keyed by turn id."""

import asyncio

from agentchat.domain.entities.protocol import ProtocolStep, Turn
from agentchat.infrastructure.stores.broadcast import Broadcaster, Subscription
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class ProtocolTimelineStore:
    """Holds the ordered protocol steps of every turn.

    ``append`` is the only mutation. Steps are never removed, replaced or
    reordered, and timelines live for the lifetime of the process.
    Appends from concurrent turns are serialized by a lock.
    """

    def __init__(self) -> None:
        self._timelines: dict[str, list[ProtocolStep]] = {}
        self._lock = asyncio.Lock()
        self._broadcaster: Broadcaster[Turn | None] = Broadcaster("timeline")

    async def ensure(self, turn_id: str) -> Turn:
        """Create an empty timeline for ``turn_id`` if absent. Idempotent."""
        async with self._lock:
            return self._ensure_locked(turn_id)

    async def append(self, turn_id: str, step: ProtocolStep) -> Turn:
        """Append ``step`` to the end of the turn's timeline, creating it if needed."""
        async with self._lock:
            self._ensure_locked(turn_id)
            self._timelines[turn_id].append(step)
            snapshot = self._snapshot(turn_id)
            self._broadcaster.publish(turn_id, snapshot)

        logger.debug(
            "Protocol step appended",
            extra={
                "turn": turn_id,
                "step_kind": step.kind,
                "actor": step.actor.id,
                "step_count": len(snapshot.steps),
            },
        )
        return snapshot

    def get(self, turn_id: str) -> Turn | None:
        """Snapshot of the turn's timeline, or None if it was never created."""
        if turn_id not in self._timelines:
            return None
        return self._snapshot(turn_id)

    def watch(self, turn_id: str) -> Subscription[Turn | None]:
        """Subscribe to a turn.

        The first value is the current snapshot (None if the turn does not
        exist yet); every later append to this turn delivers a new snapshot.
        Call ``close()`` on the subscription to stop watching.
        """
        return self._broadcaster.subscribe(turn_id, self.get(turn_id))

    def __contains__(self, turn_id: object) -> bool:
        return turn_id in self._timelines

    def __len__(self) -> int:
        return len(self._timelines)

    def _ensure_locked(self, turn_id: str) -> Turn:
        if turn_id not in self._timelines:
            self._timelines[turn_id] = []
            snapshot = self._snapshot(turn_id)
            self._broadcaster.publish(turn_id, snapshot)
            logger.debug("Protocol turn created", extra={"turn": turn_id})
            return snapshot
        return self._snapshot(turn_id)

    def _snapshot(self, turn_id: str) -> Turn:
        return Turn(turn_id=turn_id, steps=tuple(self._timelines[turn_id]))
