"""Reaction ORM — one user's current feedback signal on one campaign.

Invariants:
    - At most one row per (user_id, campaign_id): reactions_user_campaign_unique
    - type is a ReactionType value: still_works | expired | info_incorrect
    - Rows are created, updated in place (type + updated_at), or deleted; nothing else

Design Decisions:
    - user_id is the opaque identity string from the auth provider, no users table
    - ON DELETE CASCADE from campaigns: hard-deleting a campaign drops its reactions
    - type stored as String, not a DB enum: adding a type needs no enum migration
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from freecredit.db.base import Base
from freecredit.models.campaign import _utcnow

REACTION_PAIR_CONSTRAINT = "reactions_user_campaign_unique"


class Reaction(Base):
    """Reaction entity — still_works / expired / info_incorrect."""
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "campaign_id", name=REACTION_PAIR_CONSTRAINT,
        ),
        Index("reactions_campaign_id_idx", "campaign_id"),
        Index("reactions_user_id_idx", "user_id"),
        Index("reactions_type_idx", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    campaign_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
