"""Tests for the protocol timeline store."""

import asyncio

import pytest

from agentchat.domain.entities.agent import BACKEND_ACTOR, PLANNER
from agentchat.domain.entities.protocol import ProtocolStep
from agentchat.infrastructure.stores.timeline import ProtocolTimelineStore


def _step(kind: str = "plan") -> ProtocolStep:
    return ProtocolStep.create(kind, PLANNER.as_actor())


class TestProtocolTimelineStore:
    def test_get_unknown_turn(self):
        store = ProtocolTimelineStore()

        assert store.get("missing") is None
        assert "missing" not in store

    @pytest.mark.asyncio
    async def test_ensure_is_idempotent(self):
        store = ProtocolTimelineStore()

        await store.ensure("t1")
        await store.append("t1", _step())
        turn = await store.ensure("t1")

        assert len(turn.steps) == 1
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_append_preserves_order(self):
        store = ProtocolTimelineStore()
        steps = [_step(kind) for kind in ("plan", "route", "retrieve", "pack", "generate")]

        for step in steps:
            await store.append("t1", step)

        assert store.get("t1").steps == tuple(steps)
        assert store.get("t1").kinds == ["plan", "route", "retrieve", "pack", "generate"]

    @pytest.mark.asyncio
    async def test_append_creates_missing_turn(self):
        store = ProtocolTimelineStore()

        turn = await store.append("t1", _step("error"))

        assert turn.turn_id == "t1"
        assert "t1" in store
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_turns_are_isolated(self):
        store = ProtocolTimelineStore()

        await store.append("a", _step("plan"))
        await store.append("b", ProtocolStep.create("error", BACKEND_ACTOR))
        await store.append("a", _step("route"))

        assert store.get("a").kinds == ["plan", "route"]
        assert store.get("b").kinds == ["error"]

    @pytest.mark.asyncio
    async def test_snapshots_do_not_change(self):
        store = ProtocolTimelineStore()
        await store.append("t1", _step())

        snapshot = store.get("t1")
        await store.append("t1", _step("route"))

        assert len(snapshot.steps) == 1

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_all_kept(self):
        store = ProtocolTimelineStore()

        await asyncio.gather(*(store.append("t1", _step()) for _ in range(20)))

        assert len(store.get("t1").steps) == 20


class TestTimelineWatch:
    @pytest.mark.asyncio
    async def test_watch_before_creation(self):
        store = ProtocolTimelineStore()
        subscription = store.watch("t1")

        await store.ensure("t1")
        first_step = _step()
        await store.append("t1", first_step)

        assert await subscription.next() is None
        assert (await subscription.next()).steps == ()
        assert (await subscription.next()).steps == (first_step,)
        subscription.close()

    @pytest.mark.asyncio
    async def test_watch_starts_with_current_snapshot(self):
        store = ProtocolTimelineStore()
        await store.append("t1", _step())

        subscription = store.watch("t1")
        await store.append("t1", _step("route"))

        assert (await subscription.next()).kinds == ["plan"]
        assert (await subscription.next()).kinds == ["plan", "route"]
        subscription.close()

    @pytest.mark.asyncio
    async def test_watch_ignores_other_turns(self):
        store = ProtocolTimelineStore()
        subscription = store.watch("t1")

        await store.append("t2", _step())

        assert await subscription.next() is None
        assert subscription.pending() == 0
        subscription.close()
