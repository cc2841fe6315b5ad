"""Reaction Routes — submit, read, withdraw, and batch-read campaign reactions.

Invariants:
    - Mutations require X-User-Id (401 otherwise); reads work anonymously
    - Responses always include the post-mutation stats for the campaign
    - Batch reads are capped at settings.batch_stats_limit ids; extras are ignored
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from freecredit.api.dependencies import (
    get_current_user_id, get_optional_user_id, get_reaction_service,
)
from freecredit.config import Settings, get_settings
from freecredit.schemas.reaction import (
    BatchStatsEntry,
    BatchStatsRequest,
    ReactionOut,
    ReactionStatsOut,
    ReactionSubmit,
    ReactionSubmitResponse,
    ReactionSummaryResponse,
    ReactionWithdrawResponse,
)
from freecredit.services.reaction_service import ReactionService

router = APIRouter(prefix="/api/v1/reactions", tags=["reactions"])


@router.post("", response_model=ReactionSubmitResponse)
async def submit_reaction(
    body: ReactionSubmit,
    user_id: str = Depends(get_current_user_id),
    service: ReactionService = Depends(get_reaction_service),
):
    """Add the caller's reaction, or switch it to a new type."""
    stats = await service.submit_reaction(body.campaign_id, user_id, body.type)
    reaction = await service.get_user_reaction(body.campaign_id, user_id)
    return ReactionSubmitResponse(
        reaction=ReactionOut.model_validate(reaction),
        stats=ReactionStatsOut.from_stats(stats),
    )


@router.post("/batch", response_model=dict[UUID, BatchStatsEntry])
async def batch_reaction_stats(
    body: BatchStatsRequest,
    user_id: str | None = Depends(get_optional_user_id),
    service: ReactionService = Depends(get_reaction_service),
    settings: Settings = Depends(get_settings),
):
    """Stats for many campaigns at once (campaign list pages)."""
    campaign_ids = body.campaign_ids[: settings.batch_stats_limit]
    entries = await service.get_batch_reaction_stats(campaign_ids, user_id)
    return {
        campaign_id: BatchStatsEntry(
            stats=ReactionStatsOut.from_stats(entry.stats),
            user_reaction=entry.user_reaction,
        )
        for campaign_id, entry in entries.items()
    }


@router.get("/{campaign_id}", response_model=ReactionSummaryResponse)
async def get_reactions(
    campaign_id: UUID,
    user_id: str | None = Depends(get_optional_user_id),
    service: ReactionService = Depends(get_reaction_service),
):
    """Campaign stats plus the caller's own reaction when identified."""
    stats = await service.get_reaction_stats(campaign_id)
    user_reaction = None
    if user_id:
        reaction = await service.get_user_reaction(campaign_id, user_id)
        if reaction is not None:
            user_reaction = ReactionOut.model_validate(reaction)
    return ReactionSummaryResponse(
        stats=ReactionStatsOut.from_stats(stats), user_reaction=user_reaction,
    )


@router.delete("/{campaign_id}", response_model=ReactionWithdrawResponse)
async def withdraw_reaction(
    campaign_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: ReactionService = Depends(get_reaction_service),
):
    """Withdraw the caller's reaction. 404 when there is none."""
    stats = await service.withdraw_reaction(campaign_id, user_id)
    return ReactionWithdrawResponse(stats=ReactionStatsOut.from_stats(stats))
