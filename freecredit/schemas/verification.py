"""Verification Schemas — admin review queue and flag override responses."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from freecredit.schemas.reaction import ReactionStatsOut


class CampaignSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    slug: str
    status: str
    needs_verification: bool
    updated_at: datetime


class VerificationQueueEntry(BaseModel):
    campaign: CampaignSummary
    stats: ReactionStatsOut


class VerificationQueueResponse(BaseModel):
    items: list[VerificationQueueEntry]
    total: int


class VerificationCountResponse(BaseModel):
    count: int


class RecheckResponse(BaseModel):
    campaign_id: UUID
    needs_verification: bool


class VerifyResponse(BaseModel):
    campaign_id: UUID
    message: str
