"""FreeCredit Reactions API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FreeCreditError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from freecredit.api.error_handlers import register_error_handlers
from freecredit.api.routes import admin_verification, health, reactions
from freecredit.config import get_settings
from freecredit.infrastructure import database
from freecredit.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("FreeCredit Reactions API started")
    yield
    await manager.dispose()
    logger.info("FreeCredit Reactions API shutting down")


app = FastAPI(
    title="FreeCredit Reactions API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(reactions.router)
app.include_router(admin_verification.router)

register_error_handlers(app)
