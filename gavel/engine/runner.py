"""Async driver for one table.

The engine is a pure reducer; the runner is where time happens. It
serializes intents behind a lock, schedules the countdown tick and the
criterion roll animation as asyncio tasks, and fans snapshots out to
subscribers.

Timer tasks are keyed to the table generation. Rematch and return to menu
bump the generation, which cancels the tasks, and any timer intent that
slips through still carries the old generation and is refused by the
engine.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine

from gavel.config import Settings
from gavel.engine.engine import DispatchResult, GameEngine
from gavel.engine.snapshot import build_snapshot
from gavel.lib.models import (
    GamePhase,
    GameSnapshot,
    GameTable,
    Intent,
    RollStep,
    Tick,
)

logger = logging.getLogger(__name__)


class GameRunner:
    """Owns a table and its timers."""

    def __init__(
        self,
        table: GameTable | None = None,
        engine: GameEngine | None = None,
        settings: Settings | None = None,
    ):
        self.engine = engine or GameEngine(settings=settings)
        self.settings = self.engine.settings
        self.table = table or GameTable()

        self._lock = asyncio.Lock()
        self._closed = False
        self._tick_task: asyncio.Task[None] | None = None
        self._tick_generation: int | None = None
        self._roll_task: asyncio.Task[None] | None = None
        self._roll_generation: int | None = None
        self._subscribers: set[asyncio.Queue[GameSnapshot | None]] = set()

    @property
    def table_id(self) -> str:
        return str(self.table.table_id)

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> GameSnapshot:
        return build_snapshot(self.table)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def dispatch(self, intent: Intent) -> DispatchResult:
        """
        Apply an intent and reschedule timers.

        Args:
            intent: Intent from the presentation or a timer

        Returns:
            The engine's DispatchResult
        """
        async with self._lock:
            if self._closed:
                return DispatchResult(
                    table=self.table, accepted=False, reason="Table is closed"
                )

            result = self.engine.dispatch(self.table, intent)
            if result.accepted:
                self.table = result.table
                self._reconcile_timers()
                self._publish()
            return result

    # -------------------------------------------------------------------------
    # Timers
    # -------------------------------------------------------------------------

    def _wants_tick(self, generation: int) -> bool:
        session = self.table.session
        return (
            not self._closed
            and generation == self.table.generation
            and session is not None
            and session.phase == GamePhase.DEBATE
            and session.clock.running
        )

    def _wants_roll(self, generation: int) -> bool:
        session = self.table.session
        return (
            not self._closed
            and generation == self.table.generation
            and session is not None
            and session.rolling
        )

    def _reconcile_timers(self) -> None:
        """Start the timers the session needs and cancel the rest."""
        generation = self.table.generation

        self._tick_task, self._tick_generation = self._reconcile(
            self._tick_task,
            self._tick_generation,
            self._wants_tick(generation),
            generation,
            lambda: self._timer_loop(
                generation,
                self.settings.tick_interval_seconds,
                lambda: Tick(generation=generation),
                self._wants_tick,
            ),
        )
        self._roll_task, self._roll_generation = self._reconcile(
            self._roll_task,
            self._roll_generation,
            self._wants_roll(generation),
            generation,
            lambda: self._timer_loop(
                generation,
                self.settings.roll_interval_seconds,
                lambda: RollStep(generation=generation),
                self._wants_roll,
            ),
        )

    def _reconcile(
        self,
        task: asyncio.Task[None] | None,
        task_generation: int | None,
        wanted: bool,
        generation: int,
        factory: Callable[[], Coroutine[Any, Any, None]],
    ) -> tuple[asyncio.Task[None] | None, int | None]:
        alive = task is not None and not task.done()
        if wanted and alive and task_generation == generation:
            return task, task_generation

        self._cancel(task)
        if not wanted:
            return None, None
        return asyncio.create_task(factory()), generation

    def _cancel(self, task: asyncio.Task[None] | None) -> None:
        # A loop that stops itself is left to return on its own
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _timer_loop(
        self,
        generation: int,
        interval: float,
        make_intent: Callable[[], Intent],
        still_wanted: Callable[[int], bool],
    ) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                result = await self.dispatch(make_intent())
                if not result.accepted or not still_wanted(generation):
                    return
        except asyncio.CancelledError:
            logger.debug(f"Timer for generation {generation} cancelled")
            raise

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for queue in self._subscribers:
            queue.put_nowait(snapshot)

    def subscribe(self) -> asyncio.Queue[GameSnapshot | None]:
        """
        Open a snapshot feed.

        The queue starts with the current snapshot and receives one per
        accepted intent. ``None`` marks the end of the feed.
        """
        queue: asyncio.Queue[GameSnapshot | None] = asyncio.Queue()
        queue.put_nowait(self.snapshot())
        if self._closed:
            queue.put_nowait(None)
        else:
            self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[GameSnapshot | None]) -> None:
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Cancel timers and end all subscriptions."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            tasks = [t for t in (self._tick_task, self._roll_task) if t is not None]
            self._tick_task = self._roll_task = None

        for task in tasks:
            if task is asyncio.current_task():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        for queue in self._subscribers:
            queue.put_nowait(None)
        logger.info(f"Runner for table {self.table_id} closed")
