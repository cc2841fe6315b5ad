"""Reaction Service — runs each reaction mutation and its flag recompute as one unit of work.

Invariants:
    - Every submit, and every withdraw that deleted a row, recomputes needs_verification
      from a fresh aggregate before the single commit
    - The flag row is only written when the recomputed value differs from the stored one,
      so repeated rechecks are no-ops (updated_at untouched)
    - mark_as_verified clears the flag only; reactions are never touched by it
    - Input validated in core before any IO: ValidationError precedes NotFoundError

Design Decisions:
    - Impureim sandwich: stores read/write, core tallies and decides, stores write back
    - Stores injected as Protocol types; defaults are the SQL implementations on the
      same AsyncSession so one commit covers both tables
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from freecredit.core.domain_types import CampaignId, FlagTransition, ReactionType
from freecredit.core.enforce_reaction_input import (
    VALID_REACTION_TYPES, parse_reaction_type, require_campaign_id, require_user_id,
)
from freecredit.core.errors import ErrorContext, NotFoundError
from freecredit.core.reaction_stats import (
    ReactionStats, tally_batch_counts, tally_reaction_counts,
)
from freecredit.core.repository_protocols import (
    CampaignLike, CampaignRepository, ReactionLike, ReactionRepository,
)
from freecredit.core.verification_rule import flag_transition, needs_verification
from freecredit.services.campaign_lookup import SqlCampaignRepository
from freecredit.services.reaction_store import SqlReactionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationQueueItem:
    """One entry of the admin review queue."""
    campaign_id: UUID
    stats: ReactionStats
    campaign: CampaignLike


@dataclass(frozen=True)
class BatchReactionEntry:
    stats: ReactionStats
    user_reaction: str | None = None


class ReactionService:
    """Outbound operations of the reaction/verification engine."""

    def __init__(
        self,
        db: AsyncSession,
        reactions: ReactionRepository | None = None,
        campaigns: CampaignRepository | None = None,
    ):
        self.db = db
        self.reactions = reactions or SqlReactionStore(db)
        self.campaigns = campaigns or SqlCampaignRepository(db)

    # ─── Mutations ───────────────────────────────────────────────

    async def submit_reaction(
        self,
        campaign_id: UUID | str | None,
        user_id: str | None,
        reaction_type: ReactionType | str | None,
    ) -> ReactionStats:
        """Add or switch the user's reaction, then recompute the campaign flag."""
        cid = require_campaign_id(campaign_id)
        uid = require_user_id(user_id)
        rtype = parse_reaction_type(reaction_type, campaign_id=str(cid))

        campaign = await self.campaigns.get_campaign_if_active(cid)
        if campaign is None:
            raise NotFoundError(
                "Campaign", str(cid),
                context=ErrorContext(campaign_id=str(cid), user_id=uid),
            )

        await self.reactions.upsert_reaction(cid, uid, rtype)
        _, stats = await self._recompute_flag(cid)
        await self.db.commit()
        logger.info(
            "Reaction submitted",
            extra={
                "campaign_id": str(cid), "user_id": uid,
                "reaction_type": rtype.value,
            },
        )
        return stats

    async def withdraw_reaction(
        self, campaign_id: UUID | str | None, user_id: str | None,
    ) -> ReactionStats:
        """Remove the user's reaction, then recompute the campaign flag.

        Raises NotFoundError when the user had no reaction on the campaign.
        """
        cid = require_campaign_id(campaign_id)
        uid = require_user_id(user_id)

        removed = await self.reactions.remove_reaction(cid, uid)
        if not removed:
            raise NotFoundError(
                "Reaction", f"{cid}:{uid}",
                context=ErrorContext(campaign_id=str(cid), user_id=uid),
            )

        _, stats = await self._recompute_flag(cid)
        await self.db.commit()
        logger.info(
            "Reaction withdrawn",
            extra={"campaign_id": str(cid), "user_id": uid},
        )
        return stats

    async def refresh_verification_flag(self, campaign_id: UUID | str | None) -> bool:
        """Recompute and persist needs_verification without a reaction change.

        Raises NotFoundError when the campaign row does not exist. Soft-deleted
        campaigns are still recomputed; use recheck_verification to exclude them.
        """
        cid = require_campaign_id(campaign_id)
        flag, _ = await self._recompute_flag(cid)
        await self.db.commit()
        return flag

    async def recheck_verification(self, campaign_id: UUID | str | None) -> bool:
        """Admin recheck: like refresh_verification_flag but requires a live campaign."""
        cid = require_campaign_id(campaign_id)
        if await self.campaigns.get_campaign_if_active(cid) is None:
            raise NotFoundError(
                "Campaign", str(cid), context=ErrorContext(campaign_id=str(cid)),
            )
        return await self.refresh_verification_flag(cid)

    async def mark_as_verified(self, campaign_id: UUID | str | None) -> bool:
        """Admin override: clear the flag. False when the campaign does not exist."""
        cid = require_campaign_id(campaign_id)
        updated = await self.campaigns.set_needs_verification(cid, False)
        await self.db.commit()
        if updated:
            logger.info(
                "Campaign marked as verified",
                extra={"campaign_id": str(cid), "needs_verification": False},
            )
        return updated

    # ─── Queries ─────────────────────────────────────────────────

    async def get_reaction_stats(self, campaign_id: UUID | str | None) -> ReactionStats:
        cid = require_campaign_id(campaign_id)
        return await self.compute_stats(cid)

    async def compute_stats(self, campaign_id: CampaignId) -> ReactionStats:
        rows = await self.reactions.count_by_type(campaign_id)
        _warn_unknown_types(rows, campaign_id)
        return tally_reaction_counts(rows)

    async def compute_batch_stats(
        self, campaign_ids: Sequence[CampaignId],
    ) -> dict[CampaignId, ReactionStats]:
        """Stats for every requested id (zeros when a campaign has no reactions)."""
        if not campaign_ids:
            return {}
        rows = await self.reactions.count_by_type_for_campaigns(campaign_ids)
        for campaign_id, raw_type, count in rows:
            _warn_unknown_types([(raw_type, count)], campaign_id)
        return tally_batch_counts(campaign_ids, rows)

    async def get_user_reaction(
        self, campaign_id: UUID | str | None, user_id: str | None,
    ) -> ReactionLike | None:
        cid = require_campaign_id(campaign_id)
        uid = require_user_id(user_id)
        return await self.reactions.get_user_reaction(cid, uid)

    async def list_reactions(self, campaign_id: UUID | str | None) -> list[ReactionLike]:
        cid = require_campaign_id(campaign_id)
        return list(await self.reactions.list_reactions(cid))

    async def list_user_reactions(self, user_id: str | None) -> list[ReactionLike]:
        uid = require_user_id(user_id)
        return list(await self.reactions.list_reactions_by_user(uid))

    async def get_batch_reaction_stats(
        self, campaign_ids: Iterable[UUID | str], user_id: str | None = None,
    ) -> dict[UUID, BatchReactionEntry]:
        """Stats (and the caller's reaction) for many campaigns, two queries total."""
        ids = list(dict.fromkeys(require_campaign_id(c) for c in campaign_ids))
        if not ids:
            return {}
        stats_by_id = await self.compute_batch_stats(ids)
        user_reactions: dict[UUID, str] = {}
        if user_id:
            user_reactions = await self.reactions.get_user_reactions_for_campaigns(
                ids, require_user_id(user_id),
            )
        return {
            cid: BatchReactionEntry(
                stats=stats_by_id[cid], user_reaction=user_reactions.get(cid),
            )
            for cid in ids
        }

    async def list_campaigns_needing_verification(self) -> list[VerificationQueueItem]:
        """Admin review queue: flagged published campaigns with current stats."""
        campaigns = await self.campaigns.list_flagged_published()
        if not campaigns:
            return []
        stats_by_id = await self.compute_batch_stats(
            [CampaignId(c.id) for c in campaigns],
        )
        return [
            VerificationQueueItem(
                campaign_id=c.id, stats=stats_by_id[c.id], campaign=c,
            )
            for c in campaigns
        ]

    async def count_campaigns_needing_verification(self) -> int:
        return await self.campaigns.count_flagged_published()

    # ─── Flag updater ────────────────────────────────────────────

    async def _recompute_flag(
        self, campaign_id: CampaignId,
    ) -> tuple[bool, ReactionStats]:
        """Aggregate -> rule -> write on change. Caller commits."""
        stats = await self.compute_stats(campaign_id)
        target = needs_verification(stats)
        current = await self.campaigns.get_needs_verification(campaign_id)
        if current is None:
            raise NotFoundError(
                "Campaign", str(campaign_id),
                context=ErrorContext(campaign_id=str(campaign_id)),
            )

        transition = flag_transition(current, target)
        if transition is FlagTransition.UNCHANGED:
            logger.debug(
                "Verification flag unchanged",
                extra={"campaign_id": str(campaign_id), "needs_verification": target},
            )
            return target, stats

        await self.campaigns.set_needs_verification(campaign_id, target)
        logger.info(
            f"Verification flag {transition.value}",
            extra={
                "campaign_id": str(campaign_id),
                "needs_verification": target,
                "transition": transition.value,
            },
        )
        return target, stats


def _warn_unknown_types(
    rows: Iterable[tuple[str, int]], campaign_id: CampaignId,
) -> None:
    """Rows written outside this service may carry types the tally skips."""
    for raw_type, count in rows:
        if raw_type not in VALID_REACTION_TYPES:
            logger.warning(
                f"Skipping {count} reaction(s) with unknown type '{raw_type}'",
                extra={"campaign_id": str(campaign_id), "reaction_type": raw_type},
            )
