"""Rulebook endpoint."""

from typing import Any

from fastapi import APIRouter

from gavel.config import get_settings
from gavel.engine.rules import build_rulebook

router = APIRouter()


@router.get("/rules")
async def get_rules() -> dict[str, Any]:
    """Roles, round flow, criteria, victory rules and tips."""
    return build_rulebook(get_settings())
