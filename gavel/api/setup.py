"""Setup screen helpers."""

from fastapi import APIRouter

from gavel.config import get_settings
from gavel.engine.setup import can_start, clean_names
from gavel.lib.models import RosterCheckRequest, RosterCheckResponse

router = APIRouter()


@router.post("/setup/check", response_model=RosterCheckResponse)
async def check_roster(request: RosterCheckRequest) -> RosterCheckResponse:
    """Enable or disable the start button for the names typed so far."""
    names = clean_names(request.names)
    return RosterCheckResponse(
        names=names,
        count=len(names),
        can_start=can_start(request.names, get_settings()),
    )
