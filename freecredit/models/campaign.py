"""Campaign ORM — the slice of a free-credit campaign the reaction service touches.

Invariants:
    - id is UUID primary key
    - needs_verification is cached derived state, written only by the flag updater
      and the admin verify override
    - deleted_at set means soft-deleted: treated as nonexistent for reactions
    - status transitions: pending -> published | rejected; published -> expired

Design Decisions:
    - Only the columns this service reads are mapped; the rest of the campaign
      record (platform, translations, tags) belongs to the directory application
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from freecredit.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Campaign(Base):
    """Free-credit campaign listed in the directory."""
    __tablename__ = "campaigns"
    __table_args__ = (
        Index("campaigns_status_idx", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    slug: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="pending",
    )
    needs_verification: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
