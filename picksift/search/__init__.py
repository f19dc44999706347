"""
Search package - Matching, tiering and ranking of candidates.

Every front-end (apps, dmenu, clipboard) builds Candidate records and
hands them to rank(); the engine never branches on which mode it serves.
"""

from .candidates import (
    AppCandidate,
    Candidate,
    ClipCandidate,
    LineCandidate,
    MatchKind,
    MatchResult,
)
from .columns import ColumnProjector
from .matcher import CandidateMatch, match_candidate, match_field
from .ranking import RankedResults, Ranker, ScoredCandidate, rank
from .session import SearchSession
from .tiers import TIER_SPACING, Tier, classify, tier_base

__all__ = [
    "AppCandidate",
    "Candidate",
    "CandidateMatch",
    "ClipCandidate",
    "ColumnProjector",
    "LineCandidate",
    "MatchKind",
    "MatchResult",
    "RankedResults",
    "Ranker",
    "ScoredCandidate",
    "SearchSession",
    "TIER_SPACING",
    "Tier",
    "classify",
    "match_candidate",
    "match_field",
    "rank",
    "tier_base",
]
