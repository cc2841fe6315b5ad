"""Boundary Protocols — contracts between the reaction core and the persistence shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by services/ over an AsyncSession

Design Decisions:
    - Protocol over ABC: structural subtyping, the SQL stores need no base class
    - Async in Protocol: boundary methods are async because implementations do IO,
      the pure functions that consume their results are not
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from freecredit.core.domain_types import CampaignId, ReactionType, UserId


class ReactionLike(Protocol):
    """Structural contract for a persisted reaction row."""
    id: UUID
    campaign_id: UUID
    user_id: str
    type: str
    created_at: datetime
    updated_at: datetime


class CampaignLike(Protocol):
    """The slice of a campaign this service reads and writes."""
    id: UUID
    slug: str
    status: str
    needs_verification: bool
    deleted_at: datetime | None


class ReactionRepository(Protocol):
    """Contract for reaction persistence — at most one row per (campaign, user)."""
    async def upsert_reaction(
        self, campaign_id: CampaignId, user_id: UserId, reaction_type: ReactionType,
    ) -> ReactionLike: ...
    async def remove_reaction(
        self, campaign_id: CampaignId, user_id: UserId,
    ) -> bool: ...
    async def get_user_reaction(
        self, campaign_id: CampaignId, user_id: UserId,
    ) -> ReactionLike | None: ...
    async def list_reactions(self, campaign_id: CampaignId) -> Sequence[ReactionLike]: ...
    async def list_reactions_by_user(self, user_id: UserId) -> Sequence[ReactionLike]: ...
    async def count_by_type(
        self, campaign_id: CampaignId,
    ) -> list[tuple[str, int]]: ...
    async def count_by_type_for_campaigns(
        self, campaign_ids: Sequence[CampaignId],
    ) -> list[tuple[UUID, str, int]]: ...
    async def get_user_reactions_for_campaigns(
        self, campaign_ids: Sequence[CampaignId], user_id: UserId,
    ) -> dict[UUID, str]: ...


class CampaignRepository(Protocol):
    """Contract for the campaign collaborator — lookup plus the cached flag."""
    async def get_campaign_if_active(
        self, campaign_id: CampaignId,
    ) -> CampaignLike | None: ...
    async def get_needs_verification(
        self, campaign_id: CampaignId,
    ) -> bool | None: ...
    async def set_needs_verification(
        self, campaign_id: CampaignId, value: bool,
    ) -> bool: ...
    async def list_flagged_published(self) -> Sequence[CampaignLike]: ...
    async def count_flagged_published(self) -> int: ...
