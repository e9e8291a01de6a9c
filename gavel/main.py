"""Gavel FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gavel.api.routes import router as api_router
from gavel.config import get_settings
from gavel.engine.criteria import CRITERIA, describe
from gavel.lib.exceptions import (
    GavelError,
    IntentRejectedError,
    InvariantViolationError,
    TableExpiredError,
    TableNotFoundError,
    ValidationError,
)
from gavel.lib.models import ConfigResponse, GamePhase, HealthResponse, TeamTag
from gavel.lib.persistence import close_table_store, get_table_store

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

TEAM_LABELS = {
    TeamTag.A: "Team A - Attackers",
    TeamTag.B: "Team B - Defenders",
}


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    settings = get_settings()

    # Startup
    logger.info("Starting Gavel...")
    logger.info(f"Debug mode: {settings.debug}")
    if settings.random_seed is not None:
        logger.info(f"Random seed pinned to {settings.random_seed}")

    store = await get_table_store()
    logger.info(f"Table store initialized: {store.get_stats()}")

    yield

    # Shutdown
    logger.info("Shutting down Gavel...")
    await close_table_store()
    logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Gavel",
        description="Round engine for a party debate game",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    register_exception_handlers(app)

    # Routes
    app.include_router(api_router, prefix="/api")

    # Root endpoints
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="ok", version="0.1.0")

    @app.get("/api/config", response_model=ConfigResponse, tags=["Config"])
    async def get_config() -> ConfigResponse:
        """Get setup limits and the enumerations the presentation renders."""
        return ConfigResponse(
            limits=get_settings().limits(),
            criteria=[describe(c) for c in CRITERIA],
            teams=[{"value": t.value, "label": TEAM_LABELS[t]} for t in TeamTag],
            phases=[
                {"value": p.value, "label": p.value.replace("_", " ").title()}
                for p in GamePhase
            ],
        )

    return app


# =============================================================================
# Exception Handlers
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(TableNotFoundError)
    async def table_not_found_handler(
        request: Request, exc: TableNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": exc.message, "table_id": exc.table_id},
        )

    @app.exception_handler(TableExpiredError)
    async def table_expired_handler(
        request: Request, exc: TableExpiredError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=410,
            content={"detail": exc.message, "table_id": exc.table_id},
        )

    @app.exception_handler(IntentRejectedError)
    async def intent_rejected_handler(
        request: Request, exc: IntentRejectedError
    ) -> JSONResponse:
        logger.warning(f"Intent {exc.intent} rejected: {exc.reason}")
        return JSONResponse(
            status_code=409,
            content={"detail": exc.reason, "intent": exc.intent, "phase": exc.phase},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": exc.message,
                "field": exc.field,
                "value": str(exc.value) if exc.value else None,
            },
        )

    @app.exception_handler(InvariantViolationError)
    async def invariant_error_handler(
        request: Request, exc: InvariantViolationError
    ) -> JSONResponse:
        logger.error(f"Invariant violated: {exc.message}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal game state error", "error": exc.message},
        )

    @app.exception_handler(GavelError)
    async def gavel_error_handler(request: Request, exc: GavelError) -> JSONResponse:
        logger.error(f"Gavel error: {exc.message}")
        return JSONResponse(
            status_code=500,
            content={"detail": exc.message, "details": exc.details},
        )


# =============================================================================
# Application Instance
# =============================================================================


app = create_app()
