"""Verification Rule — tests for the pure expired-vs-still_works threshold.

Tests cover:
    - zero reactions never flag
    - strict greater-than at the 1.5 ratio boundary
    - info_incorrect does not take part in the decision
    - flag_transition classification
"""

import pytest

from freecredit.core.domain_types import FlagTransition
from freecredit.core.reaction_stats import ReactionStats
from freecredit.core.verification_rule import (
    EXPIRED_TO_STILL_WORKS_RATIO,
    flag_transition,
    needs_verification,
)


def test_ratio_is_one_and_a_half():
    assert EXPIRED_TO_STILL_WORKS_RATIO == 1.5


def test_no_reactions_does_not_need_verification():
    assert needs_verification(ReactionStats()) is False


def test_boundary_equal_to_threshold_does_not_flag():
    assert needs_verification(ReactionStats(still_works=10, expired=15)) is False


def test_boundary_just_above_threshold_flags():
    assert needs_verification(ReactionStats(still_works=10, expired=16)) is True


def test_single_expired_with_no_still_works_flags():
    assert needs_verification(ReactionStats(expired=1)) is True


def test_only_still_works_does_not_flag():
    assert needs_verification(ReactionStats(still_works=3)) is False


@pytest.mark.parametrize("info_incorrect", [0, 1, 50, 1000])
def test_info_incorrect_is_ignored(info_incorrect):
    below = ReactionStats(still_works=2, expired=3, info_incorrect=info_incorrect)
    above = ReactionStats(still_works=2, expired=4, info_incorrect=info_incorrect)
    assert needs_verification(below) is False
    assert needs_verification(above) is True


def test_only_info_incorrect_does_not_flag():
    assert needs_verification(ReactionStats(info_incorrect=20)) is False


@pytest.mark.parametrize("still_works,expired,expected", [
    (5, 9, True),    # 9 > 7.5
    (5, 8, True),    # 8 > 7.5
    (5, 7, False),   # 7 < 7.5
    (2, 3, False),   # 3 == 3.0
    (1, 2, True),    # 2 > 1.5
])
def test_threshold_table(still_works, expired, expected):
    stats = ReactionStats(still_works=still_works, expired=expired)
    assert needs_verification(stats) is expected


def test_rule_is_deterministic():
    stats = ReactionStats(still_works=4, expired=7, info_incorrect=1)
    assert {needs_verification(stats) for _ in range(10)} == {True}


def test_flag_transition_classifies_all_four_moves():
    assert flag_transition(False, True) is FlagTransition.FLAGGED
    assert flag_transition(True, False) is FlagTransition.CLEARED
    assert flag_transition(True, True) is FlagTransition.UNCHANGED
    assert flag_transition(False, False) is FlagTransition.UNCHANGED
