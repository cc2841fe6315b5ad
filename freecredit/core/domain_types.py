"""Domain Types — identity aliases and closed enums for reactions and campaigns.

Invariants:
    - CampaignId wraps UUID; UserId is the opaque identity string from the auth provider
    - ReactionType is closed: still_works | expired | info_incorrect
    - All valid states encoded as Enums — no raw string matching in core logic

Design Decisions:
    - str Enums: values are what the DB stores and the API returns, no custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

CampaignId = NewType("CampaignId", UUID)
UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ReactionType(str, Enum):
    """A user's current feedback signal on a campaign."""
    STILL_WORKS = "still_works"
    EXPIRED = "expired"
    INFO_INCORRECT = "info_incorrect"


class CampaignStatus(str, Enum):
    """Campaign lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"
    EXPIRED = "expired"


class FlagTransition(str, Enum):
    """Outcome of a flag recompute, for logging and write skipping."""
    FLAGGED = "flagged"
    CLEARED = "cleared"
    UNCHANGED = "unchanged"
