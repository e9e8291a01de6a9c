"""API router aggregating all route modules."""

from fastapi import APIRouter

from gavel.api.rules import router as rules_router
from gavel.api.setup import router as setup_router
from gavel.api.tables import router as tables_router

router = APIRouter()

# Include all sub-routers
router.include_router(tables_router, tags=["Tables"])
router.include_router(rules_router, tags=["Rules"])
router.include_router(setup_router, tags=["Setup"])
