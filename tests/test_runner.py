"""Tests for the async table runner and the table store."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Callable
from uuid import uuid4

import pytest

from gavel.config import Settings
from gavel.engine.engine import GameEngine
from gavel.engine.runner import GameRunner
from gavel.lib.exceptions import TableExpiredError, TableNotFoundError
from gavel.lib.models import (
    DeclareWinner,
    GamePhase,
    PauseClock,
    ResumeClock,
    ReturnToMenu,
    RevealTopic,
    RollCriterion,
    StartDebate,
    StartGame,
    TeamTag,
    Tick,
)
from gavel.lib.persistence import TableStore
from gavel.lib.randomness import SystemRandomness
from gavel.lib.streaming import EventType, snapshot_events

NAMES = ["Ana", "Bruno", "Carla"]


def fast_engine(**overrides) -> GameEngine:
    values = {
        "debate_seconds": 5,
        "tick_interval_seconds": 0.01,
        "roll_steps": 4,
        "roll_interval_ms": 5,
    }
    values.update(overrides)
    return GameEngine(rng=SystemRandomness(99), settings=Settings(_env_file=None, **values))


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


async def start_debate(runner: GameRunner) -> None:
    for intent in (StartGame(names=NAMES), RevealTopic(), StartDebate()):
        result = await runner.dispatch(intent)
        assert result.accepted, result.reason


class TestCountdown:
    @pytest.mark.asyncio
    async def test_clock_runs_out_and_stays_in_debate(self) -> None:
        runner = GameRunner(engine=fast_engine())
        await start_debate(runner)

        await wait_until(lambda: runner.table.session.clock.remaining == 0)
        await wait_until(lambda: runner._tick_task is None)

        session = runner.table.session
        assert not session.clock.running
        assert session.phase == GamePhase.DEBATE
        await runner.close()

    @pytest.mark.asyncio
    async def test_pause_stops_ticking(self) -> None:
        runner = GameRunner(engine=fast_engine(debate_seconds=60))
        await start_debate(runner)
        await wait_until(lambda: runner.table.session.clock.remaining < 60)

        assert (await runner.dispatch(PauseClock())).accepted
        frozen = runner.table.session.clock.remaining
        await asyncio.sleep(0.05)

        assert runner.table.session.clock.remaining == frozen
        assert runner._tick_task is None

        assert (await runner.dispatch(ResumeClock())).accepted
        await wait_until(lambda: runner.table.session.clock.remaining < frozen)
        await runner.close()

    @pytest.mark.asyncio
    async def test_stale_tick_is_refused(self) -> None:
        runner = GameRunner(engine=fast_engine(tick_interval_seconds=10))
        await start_debate(runner)
        stale = runner.table.generation - 1

        result = await runner.dispatch(Tick(generation=stale))

        assert not result.accepted
        assert runner.table.session.clock.remaining == 5
        await runner.close()


class TestCriterionRoll:
    @pytest.mark.asyncio
    async def test_roll_settles_on_its_own(self) -> None:
        runner = GameRunner(engine=fast_engine())
        await start_debate(runner)

        assert (await runner.dispatch(RollCriterion())).accepted
        assert runner.table.session.rolling
        assert runner._tick_task is None

        await wait_until(lambda: not runner.table.session.rolling)
        assert runner.table.session.round_state.criterion is not None

        result = await runner.dispatch(DeclareWinner(team=TeamTag.A))
        assert result.accepted
        assert runner.table.session.phase == GamePhase.VERDICT
        await runner.close()

    @pytest.mark.asyncio
    async def test_return_to_menu_cancels_the_roll(self) -> None:
        runner = GameRunner(engine=fast_engine(roll_steps=1000))
        await start_debate(runner)
        await runner.dispatch(RollCriterion())
        roll_task = runner._roll_task
        assert roll_task is not None

        assert (await runner.dispatch(ReturnToMenu())).accepted
        assert runner._roll_task is None

        await asyncio.sleep(0.02)
        assert roll_task.done()
        assert runner.table.session is None
        await runner.close()


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_feed_starts_with_current_snapshot(self) -> None:
        runner = GameRunner(engine=fast_engine())
        queue = runner.subscribe()

        first = queue.get_nowait()
        assert first.phase is None
        assert "start_game" in first.available_intents

        await runner.dispatch(StartGame(names=NAMES))
        second = queue.get_nowait()
        assert second.phase == GamePhase.ROLE_ASSIGNMENT

        await runner.close()
        assert queue.get_nowait() is None

    @pytest.mark.asyncio
    async def test_rejected_intents_are_not_published(self) -> None:
        runner = GameRunner(engine=fast_engine())
        queue = runner.subscribe()
        queue.get_nowait()

        result = await runner.dispatch(RevealTopic())

        assert not result.accepted
        assert queue.empty()
        await runner.close()

    @pytest.mark.asyncio
    async def test_closed_runner_refuses_intents(self) -> None:
        runner = GameRunner(engine=fast_engine())
        await start_debate(runner)
        await runner.close()
        remaining = runner.table.session.clock.remaining

        result = await runner.dispatch(PauseClock())

        assert not result.accepted
        assert result.reason == "Table is closed"
        await asyncio.sleep(0.03)
        assert runner.table.session.clock.remaining == remaining

    @pytest.mark.asyncio
    async def test_event_stream_ends_on_close(self) -> None:
        runner = GameRunner(engine=fast_engine())
        events = snapshot_events(runner, heartbeat_interval=0.01)

        first = await events.__anext__()
        assert first["event"] == EventType.SNAPSHOT
        assert first["id"] == "0"

        heartbeat = await events.__anext__()
        assert heartbeat["event"] == EventType.HEARTBEAT

        await runner.close()
        closed = await events.__anext__()
        assert closed["event"] == EventType.CLOSED

        with pytest.raises(StopAsyncIteration):
            await events.__anext__()
        assert runner.subscriber_count == 0


class TestTableStore:
    @pytest.mark.asyncio
    async def test_create_get_delete(self) -> None:
        store = TableStore(settings=Settings(_env_file=None), engine=fast_engine())
        runner = await store.create()
        table_id = runner.table.table_id

        assert await store.get(table_id) is runner
        assert await store.list_tables() == [table_id]
        assert store.get_stats()["tables"] == 1

        await store.delete(table_id)
        assert runner.closed
        assert not await store.exists(table_id)
        with pytest.raises(TableNotFoundError):
            await store.get(table_id)

    @pytest.mark.asyncio
    async def test_unknown_table(self) -> None:
        store = TableStore(settings=Settings(_env_file=None), engine=fast_engine())

        with pytest.raises(TableNotFoundError):
            await store.get(uuid4())
        with pytest.raises(TableNotFoundError):
            await store.delete(uuid4())

    @pytest.mark.asyncio
    async def test_expired_tables(self) -> None:
        store = TableStore(settings=Settings(_env_file=None), engine=fast_engine())
        old = await store.create()
        fresh = await store.create()
        old.table.created_at -= timedelta(hours=25)

        assert await store.cleanup_expired() == 1
        assert old.closed
        assert await store.list_tables() == [fresh.table.table_id]

        fresh.table.created_at -= timedelta(hours=25)
        with pytest.raises(TableExpiredError):
            await store.get(fresh.table.table_id)

    @pytest.mark.asyncio
    async def test_expiry_wins_over_a_racing_delete(self) -> None:
        store = TableStore(settings=Settings(_env_file=None), engine=fast_engine())
        runner = await store.create()
        table_id = runner.table.table_id
        runner.table.created_at -= timedelta(hours=25)

        get_result, delete_result = await asyncio.gather(
            store.get(table_id), store.delete(table_id), return_exceptions=True
        )

        assert isinstance(get_result, TableExpiredError)
        assert isinstance(delete_result, TableNotFoundError)
        assert runner.closed
        assert not await store.exists(table_id)

    @pytest.mark.asyncio
    async def test_shutdown_closes_every_runner(self) -> None:
        store = TableStore(settings=Settings(_env_file=None), engine=fast_engine())
        runner = await store.create()
        await start_debate(runner)

        await store.shutdown()

        assert runner.closed
        assert runner._tick_task is None
        assert await store.list_tables() == []
