"""Reaction Store — SQL implementation of ReactionRepository over an AsyncSession.

Invariants:
    - At most one row per (campaign_id, user_id); the unique constraint is the backstop
    - upsert_reaction updates type + updated_at in place when a row exists
    - A lost insert race is rolled back and retried once as an update, then ConflictError
    - Methods flush but never commit: the caller owns the unit of work

Design Decisions:
    - Read-then-write over dialect-specific ON CONFLICT: same code on PostgreSQL
      and SQLite, and the race window is closed by the constraint + retry
    - Aggregates returned as plain (type, count) rows; the arithmetic lives in
      core/reaction_stats.py
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from freecredit.core.domain_types import CampaignId, ReactionType, UserId
from freecredit.core.errors import ConflictError, ErrorContext
from freecredit.models.reaction import Reaction

logger = logging.getLogger(__name__)

# First attempt plus the single retry after a unique-constraint race
UPSERT_ATTEMPTS = 2


class SqlReactionStore:
    """Reaction persistence and grouped counts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert_reaction(
        self, campaign_id: CampaignId, user_id: UserId, reaction_type: ReactionType,
    ) -> Reaction:
        """Insert the user's reaction, or switch its type if one exists."""
        for attempt in range(UPSERT_ATTEMPTS):
            existing = await self.get_user_reaction(campaign_id, user_id)
            if existing is not None:
                existing.type = reaction_type.value
                existing.updated_at = datetime.now(timezone.utc)
                await self.db.flush()
                return existing

            reaction = Reaction(
                campaign_id=campaign_id,
                user_id=user_id,
                type=reaction_type.value,
            )
            self.db.add(reaction)
            try:
                await self.db.flush()
                return reaction
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(
                    f"Reaction insert conflicted (attempt {attempt + 1}): {e.orig}",
                    extra={"campaign_id": str(campaign_id), "user_id": user_id},
                )

        raise ConflictError(
            "Reaction could not be saved due to a concurrent update",
            context=ErrorContext(campaign_id=str(campaign_id), user_id=user_id),
        )

    async def remove_reaction(
        self, campaign_id: CampaignId, user_id: UserId,
    ) -> bool:
        """Delete the user's reaction. False when there was none."""
        result = await self.db.execute(
            delete(Reaction)
            .where(Reaction.campaign_id == campaign_id)
            .where(Reaction.user_id == user_id),
        )
        return (result.rowcount or 0) > 0

    async def get_user_reaction(
        self, campaign_id: CampaignId, user_id: UserId,
    ) -> Reaction | None:
        result = await self.db.execute(
            select(Reaction)
            .where(Reaction.campaign_id == campaign_id)
            .where(Reaction.user_id == user_id)
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def list_reactions(self, campaign_id: CampaignId) -> Sequence[Reaction]:
        result = await self.db.execute(
            select(Reaction)
            .where(Reaction.campaign_id == campaign_id)
            .order_by(Reaction.created_at),
        )
        return result.scalars().all()

    async def list_reactions_by_user(self, user_id: UserId) -> Sequence[Reaction]:
        result = await self.db.execute(
            select(Reaction)
            .where(Reaction.user_id == user_id)
            .order_by(Reaction.created_at),
        )
        return result.scalars().all()

    async def count_by_type(
        self, campaign_id: CampaignId,
    ) -> list[tuple[str, int]]:
        """Reaction counts for one campaign, grouped by type."""
        result = await self.db.execute(
            select(Reaction.type, func.count())
            .where(Reaction.campaign_id == campaign_id)
            .group_by(Reaction.type),
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_by_type_for_campaigns(
        self, campaign_ids: Sequence[CampaignId],
    ) -> list[tuple[UUID, str, int]]:
        """Reaction counts for many campaigns in one grouped query."""
        if not campaign_ids:
            return []
        result = await self.db.execute(
            select(Reaction.campaign_id, Reaction.type, func.count())
            .where(Reaction.campaign_id.in_(campaign_ids))
            .group_by(Reaction.campaign_id, Reaction.type),
        )
        return [(row[0], row[1], row[2]) for row in result.all()]

    async def get_user_reactions_for_campaigns(
        self, campaign_ids: Sequence[CampaignId], user_id: UserId,
    ) -> dict[UUID, str]:
        if not campaign_ids:
            return {}
        result = await self.db.execute(
            select(Reaction.campaign_id, Reaction.type)
            .where(Reaction.campaign_id.in_(campaign_ids))
            .where(Reaction.user_id == user_id),
        )
        return {row[0]: row[1] for row in result.all()}
