"""SSE streaming helpers for Gavel."""

import asyncio
import json
import logging
from typing import Any, AsyncIterator

from gavel.engine.runner import GameRunner
from gavel.lib.models import GameSnapshot

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 15.0  # seconds


class EventType:
    """SSE event type constants."""

    SNAPSHOT = "snapshot"
    HEARTBEAT = "heartbeat"
    CLOSED = "closed"


def format_snapshot(snapshot: GameSnapshot, sequence: int) -> dict[str, Any]:
    """Format a snapshot as an sse-starlette event."""
    return {
        "id": str(sequence),
        "event": EventType.SNAPSHOT,
        "data": snapshot.model_dump_json(),
    }


def format_simple(event_type: str, data: Any) -> dict[str, Any]:
    """Format a simple SSE event."""
    return {"event": event_type, "data": json.dumps(data)}


async def snapshot_events(
    runner: GameRunner,
    heartbeat_interval: float = HEARTBEAT_INTERVAL,
) -> AsyncIterator[dict[str, Any]]:
    """
    Stream a table's snapshots with heartbeat keep-alive.

    Yields:
        sse-starlette event dicts; ends with a ``closed`` event when the
        table is discarded
    """
    sequence = 0
    queue = runner.subscribe()
    try:
        while True:
            try:
                snapshot = await asyncio.wait_for(queue.get(), timeout=heartbeat_interval)
            except asyncio.TimeoutError:
                yield format_simple(EventType.HEARTBEAT, {"table_id": runner.table_id})
                continue

            if snapshot is None:
                yield format_simple(EventType.CLOSED, {"table_id": runner.table_id})
                break

            yield format_snapshot(snapshot, sequence)
            sequence += 1
    finally:
        runner.unsubscribe(queue)
        logger.debug(f"Stream for table {runner.table_id} ended")
