"""Admin Verification Routes — review queue, manual verify, and flag recheck.

Invariants:
    - Every route requires the admin token (require_admin)
    - verify clears the flag only; reactions are untouched
    - recheck recomputes from current reactions and writes only on change
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from freecredit.api.dependencies import get_reaction_service, require_admin
from freecredit.core.errors import ErrorContext, NotFoundError
from freecredit.schemas.reaction import ReactionStatsOut
from freecredit.schemas.verification import (
    CampaignSummary,
    RecheckResponse,
    VerificationCountResponse,
    VerificationQueueEntry,
    VerificationQueueResponse,
    VerifyResponse,
)
from freecredit.services.reaction_service import ReactionService

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/verification-needed", response_model=VerificationQueueResponse)
async def list_verification_needed(
    service: ReactionService = Depends(get_reaction_service),
):
    """Published campaigns that community feedback flagged for review."""
    items = await service.list_campaigns_needing_verification()
    return VerificationQueueResponse(
        items=[
            VerificationQueueEntry(
                campaign=CampaignSummary.model_validate(item.campaign),
                stats=ReactionStatsOut.from_stats(item.stats),
            )
            for item in items
        ],
        total=len(items),
    )


@router.get(
    "/verification-needed/count", response_model=VerificationCountResponse,
)
async def count_verification_needed(
    service: ReactionService = Depends(get_reaction_service),
):
    """Badge count for the admin dashboard."""
    count = await service.count_campaigns_needing_verification()
    return VerificationCountResponse(count=count)


@router.post("/campaigns/{campaign_id}/verify", response_model=VerifyResponse)
async def verify_campaign(
    campaign_id: UUID,
    service: ReactionService = Depends(get_reaction_service),
):
    """Clear the needs_verification flag after a manual review."""
    if not await service.mark_as_verified(campaign_id):
        raise NotFoundError(
            "Campaign", str(campaign_id),
            context=ErrorContext(campaign_id=str(campaign_id)),
        )
    return VerifyResponse(
        campaign_id=campaign_id, message="Campaign marked as verified",
    )


@router.post("/campaigns/{campaign_id}/recheck", response_model=RecheckResponse)
async def recheck_campaign(
    campaign_id: UUID,
    service: ReactionService = Depends(get_reaction_service),
):
    """Recompute the flag from the current reactions."""
    flag = await service.recheck_verification(campaign_id)
    return RecheckResponse(campaign_id=campaign_id, needs_verification=flag)
