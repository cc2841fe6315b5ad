"""Verification Rule — decides whether community feedback flags a campaign for review.

Invariants:
    - needs_verification is PURE: same stats in, same bool out
    - No reactions -> False (no signal yet)
    - Flag iff expired > still_works * EXPIRED_TO_STILL_WORKS_RATIO (strictly greater)
    - info_incorrect is tracked in stats but does not take part in the comparison
    - EXPIRED_TO_STILL_WORKS_RATIO (1.5) is single source of truth for the cutoff

Design Decisions:
    - Ratio is a constant, not a setting: changing it changes which campaigns
      are flagged retroactively on their next mutation
    - flag_transition lets the shell skip writes when nothing changes, which
      keeps an admin recheck a true no-op
"""

from freecredit.core.domain_types import FlagTransition
from freecredit.core.reaction_stats import ReactionStats


EXPIRED_TO_STILL_WORKS_RATIO: float = 1.5


def needs_verification(stats: ReactionStats) -> bool:
    """Evaluate the threshold rule against aggregate counts."""
    if stats.total == 0:
        return False
    return stats.expired > stats.still_works * EXPIRED_TO_STILL_WORKS_RATIO


def flag_transition(current: bool, target: bool) -> FlagTransition:
    """Classify the move from the stored flag to the recomputed one."""
    if current == target:
        return FlagTransition.UNCHANGED
    if target:
        return FlagTransition.FLAGGED
    return FlagTransition.CLEARED
