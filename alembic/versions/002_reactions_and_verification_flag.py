"""Add reactions table and campaigns.needs_verification.

Revision ID: 002_reactions
Revises: 001_initial
Create Date: 2026-02-14

One reaction per user per campaign (reactions_user_campaign_unique).
needs_verification is recomputed by the service after every reaction change;
existing campaigns start unflagged.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002_reactions"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "campaigns",
        sa.Column("needs_verification", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "reactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "campaign_id", UUID(as_uuid=True),
            sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "campaign_id", name="reactions_user_campaign_unique"),
    )
    op.create_index("reactions_campaign_id_idx", "reactions", ["campaign_id"])
    op.create_index("reactions_user_id_idx", "reactions", ["user_id"])
    op.create_index("reactions_type_idx", "reactions", ["type"])


def downgrade() -> None:
    op.drop_index("reactions_type_idx", table_name="reactions")
    op.drop_index("reactions_user_id_idx", table_name="reactions")
    op.drop_index("reactions_campaign_id_idx", table_name="reactions")
    op.drop_table("reactions")
    op.drop_column("campaigns", "needs_verification")
