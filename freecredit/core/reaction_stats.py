"""Reaction Stats — pure aggregation of per-type reaction counts.

Invariants:
    - total == still_works + expired + info_incorrect, always (computed, never passed in)
    - No reactions -> every field is 0
    - Each ReactionType maps to exactly one field; the match below is exhaustive

Design Decisions:
    - Frozen dataclass: stats are a value computed per request, never mutated or persisted
    - Input is (type, count) rows as produced by a GROUP BY query, so the shell
      stays a single aggregate query and the arithmetic stays here
"""

from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from typing import TypeVar

from freecredit.core.domain_types import ReactionType

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True)
class ReactionStats:
    """Aggregate reaction counts for one campaign."""
    still_works: int = 0
    expired: int = 0
    info_incorrect: int = 0
    total: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "total", self.still_works + self.expired + self.info_incorrect,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "still_works": self.still_works,
            "expired": self.expired,
            "info_incorrect": self.info_incorrect,
            "total": self.total,
        }


EMPTY_STATS = ReactionStats()


def tally_reaction_counts(
    rows: Iterable[tuple[ReactionType | str, int]],
) -> ReactionStats:
    """Fold grouped (type, count) rows into ReactionStats. Pure, no IO.

    Rows whose type is not a ReactionType value are ignored. Repeated types
    are summed, so ungrouped rows of (type, 1) also work.
    """
    counts = {reaction_type: 0 for reaction_type in ReactionType}
    for raw_type, count in rows:
        try:
            reaction_type = ReactionType(raw_type)
        except ValueError:
            continue
        counts[reaction_type] += int(count)

    still_works = expired = info_incorrect = 0
    for reaction_type, count in counts.items():
        match reaction_type:
            case ReactionType.STILL_WORKS:
                still_works = count
            case ReactionType.EXPIRED:
                expired = count
            case ReactionType.INFO_INCORRECT:
                info_incorrect = count
    return ReactionStats(
        still_works=still_works, expired=expired, info_incorrect=info_incorrect,
    )


def tally_batch_counts(
    campaign_ids: Iterable[K],
    rows: Iterable[tuple[K, ReactionType | str, int]],
) -> dict[K, ReactionStats]:
    """Fold (campaign, type, count) rows into per-campaign stats.

    Every requested campaign gets an entry, zeros when it has no rows.
    Rows for campaigns that were not requested are dropped.
    """
    grouped: dict[K, list[tuple[ReactionType | str, int]]] = {
        campaign_id: [] for campaign_id in campaign_ids
    }
    for campaign_id, raw_type, count in rows:
        if campaign_id in grouped:
            grouped[campaign_id].append((raw_type, count))
    return {
        campaign_id: tally_reaction_counts(campaign_rows)
        for campaign_id, campaign_rows in grouped.items()
    }
