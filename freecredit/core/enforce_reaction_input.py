"""Reaction Input Enforcement — validates identifiers and reaction type before any IO.

Invariants:
    - Raises ValidationError (never NotFoundError): "invalid input" stays
      distinguishable from "campaign not found"
    - Returns normalized values; callers use the return, not the raw input
    - Blank user ids (whitespace only) count as missing
"""

from uuid import UUID

from freecredit.core.domain_types import CampaignId, ReactionType, UserId
from freecredit.core.errors import ErrorContext, ValidationError


VALID_REACTION_TYPES: tuple[str, ...] = tuple(t.value for t in ReactionType)


def require_campaign_id(campaign_id: UUID | str | None) -> CampaignId:
    """Campaign id must be present and parse as a UUID."""
    if campaign_id is None or (isinstance(campaign_id, str) and not campaign_id.strip()):
        raise ValidationError("campaign_id is required", field="campaign_id")
    if isinstance(campaign_id, UUID):
        return CampaignId(campaign_id)
    try:
        return CampaignId(UUID(campaign_id.strip()))
    except (ValueError, AttributeError):
        raise ValidationError(
            f"campaign_id '{campaign_id}' is not a valid id", field="campaign_id",
        )


def require_user_id(user_id: str | None) -> UserId:
    if user_id is None or not user_id.strip():
        raise ValidationError("user_id is required", field="user_id")
    return UserId(user_id.strip())


def parse_reaction_type(
    value: ReactionType | str | None, campaign_id: str | None = None,
) -> ReactionType:
    """Map a raw type to the closed ReactionType enum."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("type is required", field="type")
    try:
        return ReactionType(value)
    except ValueError:
        raise ValidationError(
            f"Invalid reaction type '{value}'. "
            f"Expected one of: {', '.join(VALID_REACTION_TYPES)}",
            field="type",
            context=ErrorContext(campaign_id=campaign_id),
        )
