"""Reaction schemas — request bodies reject unknown types and malformed ids.

Invariants:
    - ReactionSubmit.type only accepts the three ReactionType values
    - BatchStatsRequest defaults to an empty id list
    - ReactionStatsOut mirrors ReactionStats including total
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from freecredit.core.domain_types import ReactionType
from freecredit.core.reaction_stats import ReactionStats
from freecredit.schemas.reaction import (
    BatchStatsRequest,
    ReactionStatsOut,
    ReactionSubmit,
)


@pytest.mark.parametrize("value", ["still_works", "expired", "info_incorrect"])
def test_submit_accepts_known_types(value):
    body = ReactionSubmit(campaign_id=uuid4(), type=value)
    assert body.type is ReactionType(value)


@pytest.mark.parametrize("value", ["thumbs_up", "EXPIRED", ""])
def test_submit_rejects_unknown_type(value):
    with pytest.raises(ValidationError):
        ReactionSubmit(campaign_id=uuid4(), type=value)


def test_submit_rejects_malformed_campaign_id():
    with pytest.raises(ValidationError):
        ReactionSubmit(campaign_id="campaign-1", type="expired")


def test_batch_request_defaults_to_empty():
    assert BatchStatsRequest().campaign_ids == []


def test_stats_out_carries_total():
    out = ReactionStatsOut.from_stats(ReactionStats(still_works=2, expired=1))
    assert out.model_dump() == {
        "still_works": 2, "expired": 1, "info_incorrect": 0, "total": 3,
    }
