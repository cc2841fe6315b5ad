"""Campaign Lookup — SQL implementation of CampaignRepository for the reaction service.

Invariants:
    - get_campaign_if_active ignores soft-deleted rows (deleted_at IS NOT NULL)
    - set_needs_verification is the only writer of the cached flag; it bumps updated_at
    - The verification queue only lists published, non-deleted, flagged campaigns
    - Methods never commit: the caller owns the unit of work
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from freecredit.core.domain_types import CampaignId, CampaignStatus
from freecredit.models.campaign import Campaign


class SqlCampaignRepository:
    """Campaign reads and needs_verification writes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_campaign_if_active(
        self, campaign_id: CampaignId,
    ) -> Campaign | None:
        result = await self.db.execute(
            select(Campaign)
            .where(Campaign.id == campaign_id)
            .where(Campaign.deleted_at.is_(None)),
        )
        return result.scalar_one_or_none()

    async def get_needs_verification(
        self, campaign_id: CampaignId,
    ) -> bool | None:
        """Current stored flag, or None when the campaign row is gone."""
        result = await self.db.execute(
            select(Campaign.needs_verification).where(Campaign.id == campaign_id),
        )
        return result.scalar_one_or_none()

    async def set_needs_verification(
        self, campaign_id: CampaignId, value: bool,
    ) -> bool:
        """Write the flag. False when no campaign row matched."""
        result = await self.db.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id)
            .values(
                needs_verification=value,
                updated_at=datetime.now(timezone.utc),
            ),
        )
        return (result.rowcount or 0) > 0

    async def list_flagged_published(self) -> Sequence[Campaign]:
        result = await self.db.execute(
            select(Campaign)
            .where(*self._flagged_published())
            .order_by(Campaign.updated_at.desc()),
        )
        return result.scalars().all()

    async def count_flagged_published(self) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Campaign)
            .where(*self._flagged_published()),
        )
        return int(result.scalar_one())

    @staticmethod
    def _flagged_published() -> tuple:
        return (
            Campaign.needs_verification.is_(True),
            Campaign.status == CampaignStatus.PUBLISHED.value,
            Campaign.deleted_at.is_(None),
        )
