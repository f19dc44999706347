"""
Tier Classifier - Coarse priority buckets for ranked results.

A candidate's tier comes from a fixed table keyed on pin status, the
kind of its best match, and whether that match was in a secondary field
(keywords, categories, description). Pinned candidates always sit above
every non-pinned one, whatever the match kind: a pinned fuzzy hit
outranks a non-pinned exact hit. This holds in every mode.

Tiers never look at matcher scores or frecency; those only order
candidates within a tier (see ranking.ScoredCandidate).
"""

from enum import IntEnum
from typing import Optional

from .candidates import MatchKind

# Gap between the base scores of adjacent tiers. Fine-grained scores are
# clamped to less than half of this, so tiers can never overlap.
TIER_SPACING = 10_000_000


class Tier(IntEnum):
    """Priority buckets, higher value ranks first."""
    SECONDARY = 0
    FUZZY = 1
    PREFIX = 2
    PREFIX_WORD_START = 3
    EXACT = 4
    PINNED_SECONDARY = 5
    PINNED_FUZZY = 6
    PINNED_PREFIX = 7
    PINNED_PREFIX_WORD_START = 8
    PINNED_EXACT = 9

    @property
    def pinned(self) -> bool:
        return self >= Tier.PINNED_SECONDARY


_BY_KIND = {
    MatchKind.FUZZY: Tier.FUZZY,
    MatchKind.PREFIX: Tier.PREFIX,
    MatchKind.PREFIX_WORD_START: Tier.PREFIX_WORD_START,
    MatchKind.EXACT: Tier.EXACT,
}

_PINNED = {
    Tier.SECONDARY: Tier.PINNED_SECONDARY,
    Tier.FUZZY: Tier.PINNED_FUZZY,
    Tier.PREFIX: Tier.PINNED_PREFIX,
    Tier.PREFIX_WORD_START: Tier.PINNED_PREFIX_WORD_START,
    Tier.EXACT: Tier.PINNED_EXACT,
}


def tier_base(tier: Tier) -> int:
    """Base score of a tier."""
    return int(tier) * TIER_SPACING


def classify(is_pinned: bool, best_match) -> Optional[Tier]:
    """
    Place a candidate in a tier.

    Args:
        is_pinned: Pin flag from the history store
        best_match: matcher.CandidateMatch, or None if nothing matched

    Returns:
        Tier, or None when the candidate should be excluded
    """
    if best_match is None:
        return None
    tier = Tier.SECONDARY if best_match.secondary else _BY_KIND[best_match.kind]
    return _PINNED[tier] if is_pinned else tier
