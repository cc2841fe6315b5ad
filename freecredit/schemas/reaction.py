"""Reaction Schemas — Pydantic models for the reaction endpoints.

Invariants:
    - ReactionSubmit.type is the closed ReactionType enum; unknown values are a 400
    - Outbound type fields are plain str: rows written outside this service may
      hold types the enum does not know, and reads must still serialize them
    - Stats always carry total alongside the three per-type counts
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from freecredit.core.domain_types import ReactionType
from freecredit.core.reaction_stats import ReactionStats


class ReactionSubmit(BaseModel):
    """Add or switch the caller's reaction on a campaign."""
    campaign_id: UUID
    type: ReactionType


class ReactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    campaign_id: UUID
    user_id: str
    type: str
    created_at: datetime
    updated_at: datetime


class ReactionStatsOut(BaseModel):
    still_works: int = 0
    expired: int = 0
    info_incorrect: int = 0
    total: int = 0

    @classmethod
    def from_stats(cls, stats: ReactionStats) -> "ReactionStatsOut":
        return cls(**stats.to_dict())


class ReactionSubmitResponse(BaseModel):
    reaction: ReactionOut
    stats: ReactionStatsOut


class ReactionSummaryResponse(BaseModel):
    """Campaign stats plus the caller's own reaction, if any."""
    stats: ReactionStatsOut
    user_reaction: ReactionOut | None = None


class ReactionWithdrawResponse(BaseModel):
    stats: ReactionStatsOut


class BatchStatsRequest(BaseModel):
    campaign_ids: list[UUID] = Field(default_factory=list)


class BatchStatsEntry(BaseModel):
    stats: ReactionStatsOut
    user_reaction: str | None = None
