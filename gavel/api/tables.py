"""Table lifecycle and intent dispatch endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sse_starlette.sse import EventSourceResponse

from gavel.lib.exceptions import IntentRejectedError
from gavel.lib.models import (
    TIMER_INTENTS,
    CreateTableResponse,
    DispatchResponse,
    GameSnapshot,
    Intent,
)
from gavel.lib.persistence import TableStore, get_table_store
from gavel.lib.streaming import snapshot_events

router = APIRouter()
logger = logging.getLogger(__name__)


class DispatchRequest(BaseModel):
    """Request carrying one intent."""

    intent: Intent = Field(description="Intent to apply, tagged by its type")


@router.post("/tables", response_model=CreateTableResponse)
async def create_table(
    store: TableStore = Depends(get_table_store),
) -> CreateTableResponse:
    """Open a new table at the menu screen."""
    runner = await store.create()
    return CreateTableResponse(table_id=runner.table.table_id, snapshot=runner.snapshot())


@router.get("/tables/{table_id}", response_model=GameSnapshot)
async def get_table(
    table_id: UUID,
    store: TableStore = Depends(get_table_store),
) -> GameSnapshot:
    """Get the current snapshot."""
    runner = await store.get(table_id)
    return runner.snapshot()


@router.post("/tables/{table_id}/intents", response_model=DispatchResponse)
async def dispatch_intent(
    table_id: UUID,
    request: DispatchRequest,
    store: TableStore = Depends(get_table_store),
) -> DispatchResponse:
    """
    Apply one intent to a table.

    Refused intents leave the table unchanged and return 409 with the reason.
    """
    intent = request.intent
    if intent.type in TIMER_INTENTS:
        raise HTTPException(
            status_code=400,
            detail=f"{intent.type} is scheduled by the server, not sent by clients",
        )

    runner = await store.get(table_id)
    result = await runner.dispatch(intent)
    if not result.accepted:
        session = runner.table.session
        raise IntentRejectedError(
            result.reason,
            intent=intent.type,
            phase=session.phase.value if session else None,
        )

    return DispatchResponse(snapshot=runner.snapshot())


@router.get("/tables/{table_id}/stream")
async def stream_table(
    table_id: UUID,
    store: TableStore = Depends(get_table_store),
) -> EventSourceResponse:
    """Stream snapshots over SSE, one per accepted intent or timer step."""
    runner = await store.get(table_id)
    logger.info(f"Client subscribed to table {table_id}")
    return EventSourceResponse(snapshot_events(runner))


@router.delete("/tables/{table_id}")
async def delete_table(
    table_id: UUID,
    store: TableStore = Depends(get_table_store),
) -> dict:
    """Discard a table and stop its timers."""
    await store.delete(table_id)
    return {"table_id": str(table_id), "status": "deleted"}
