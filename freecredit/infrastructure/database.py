"""Database Session Manager — async engine, per-request sessions, and DB error translation.

Invariants:
    - Every session auto-rolls-back on exception: a reaction write and its flag
      recompute are committed together or not at all
    - IntegrityError is translated by constraint, not by exception class:
        reactions (user_id, campaign_id) pair  -> ConflictError (500 INTERNAL_ERROR)
        reactions.campaign_id foreign key      -> NotFoundError("Campaign")
        anything else                          -> DatabaseError
    - Other SQLAlchemy exceptions escaping a session become DatabaseError (503)
    - FreeCreditError raised inside a session passes through unchanged

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: routes serialize ORM rows after the service commits
    - SQLite URLs (tests) get no pool sizing; the pair constraint is matched by
      its column list there because SQLite does not report constraint names
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy import text

from freecredit.core.errors import (
    ConflictError, DatabaseError, ErrorContext, FreeCreditError, NotFoundError,
)
from freecredit.models.reaction import REACTION_PAIR_CONSTRAINT

logger = logging.getLogger(__name__)

_PAIR_MARKERS = (
    REACTION_PAIR_CONSTRAINT,
    "reactions.user_id, reactions.campaign_id",
)


def translate_integrity_error(exc: IntegrityError) -> FreeCreditError:
    """Map a constraint violation on the reaction tables to a service error."""
    detail = str(exc.orig)
    campaign_id = _bound_campaign_id(exc.params)
    context = ErrorContext(campaign_id=campaign_id)
    if any(marker in detail for marker in _PAIR_MARKERS):
        return ConflictError(
            "Reaction could not be saved due to a concurrent update", context=context,
        )
    if "foreign key" in detail.lower():
        return NotFoundError("Campaign", campaign_id or "unknown", context=context)
    return DatabaseError("Integrity constraint violated", "commit", context=context)


def _bound_campaign_id(params) -> str | None:
    if isinstance(params, dict) and params.get("campaign_id") is not None:
        return str(params["campaign_id"])
    return None


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back and translate on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            error = translate_integrity_error(e)
            logger.error(
                f"DB integrity error: {e.orig}",
                extra={"error_code": error.code, "campaign_id": error.context.campaign_id},
            )
            raise error from e
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "query") from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a managed session (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one managed session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
