"""
Ranking Aggregator - Turn candidates + query + history into ordered results.

For each candidate: match every field, classify into a tier, add the
frecency boost, and sort by

  total_score = tier_base(tier) + clamp(matcher_score + frecency_boost)

Candidates with no matching field are dropped (an empty query matches
everything). The sort is stable, so ties keep the order the candidate
source produced them in.

rank() is a pure function of its inputs: it reads the history store
through get() and never writes to it.
"""

import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import EngineConfig
from ..services.frecency import FrecencyCalculator
from .matcher import CandidateMatch, match_candidate
from .tiers import TIER_SPACING, Tier, classify, tier_base

# Largest magnitude the within-tier part of a score may take
FINE_SCORE_LIMIT = TIER_SPACING // 2 - 1


def _clamp(value: float) -> float:
    return max(-FINE_SCORE_LIMIT, min(FINE_SCORE_LIMIT, value))


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate that survived matching, with its score breakdown."""
    candidate: object
    tier: Tier
    matcher_score: int = 0
    frecency_boost: float = 0.0
    index: int = 0
    match: Optional[CandidateMatch] = None

    @property
    def fine_score(self) -> float:
        return _clamp(self.matcher_score + self.frecency_boost)

    @property
    def total_score(self) -> float:
        return tier_base(self.tier) + self.fine_score

    @property
    def identity(self) -> str:
        return self.candidate.identity

    @property
    def positions(self) -> tuple[int, ...]:
        return self.match.result.positions if self.match else ()


class RankedResults(Sequence):
    """
    Immutable, re-iterable ranking output.

    complete is False when the candidate set was still being discovered,
    so a UI can show the ranking as provisional.
    """

    def __init__(
        self,
        query: str,
        items: Iterable[ScoredCandidate] = (),
        complete: bool = True,
    ):
        self.query = query
        self.complete = complete
        self._items = tuple(items)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return RankedResults(self.query, self._items[index], self.complete)
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RankedResults):
            return NotImplemented
        return (
            self.query == other.query
            and self.complete == other.complete
            and self._items == other._items
        )

    def __repr__(self) -> str:
        suffix = "" if self.complete else ", incomplete"
        return f"RankedResults(query={self.query!r}, {len(self._items)} items{suffix})"

    def candidates(self) -> list:
        """The ranked candidates without their scores."""
        return [item.candidate for item in self._items]

    def identities(self) -> list[str]:
        return [item.candidate.identity for item in self._items]


def rank(
    candidates: Iterable,
    query: str,
    history=None,
    now: Optional[float] = None,
    config: Optional[EngineConfig] = None,
) -> RankedResults:
    """
    Rank candidates against a query.

    Args:
        candidates: Objects satisfying search.candidates.Candidate, in
            source order
        query: Current query text
        history: Store with get(identity) -> HistoryRecord | None, or None
        now: Reference time for frecency (defaults to time.time())
        config: EngineConfig (defaults apply if None)

    Returns:
        RankedResults, best first
    """
    config = config or EngineConfig()
    calculator = FrecencyCalculator.from_config(config)
    if now is None:
        now = time.time()

    scored = []
    for index, candidate in enumerate(candidates):
        best = match_candidate(query, candidate, config.prefix_depth, config.match_mode)
        record = history.get(candidate.identity) if history is not None else None
        tier = classify(bool(record and record.pinned), best)
        if tier is None:
            continue
        scored.append(ScoredCandidate(
            candidate=candidate,
            tier=tier,
            matcher_score=best.score,
            frecency_boost=calculator.boost(record, now),
            index=index,
            match=best,
        ))

    # list.sort is stable with reverse=True, ties keep source order
    scored.sort(key=lambda s: s.total_score, reverse=True)
    return RankedResults(query, scored)


class Ranker:
    """rank() with the history store and config bound, for repeated calls."""

    def __init__(self, history=None, config: Optional[EngineConfig] = None, clock=time.time):
        self.history = history
        self.config = config or EngineConfig()
        self.clock = clock

    def rank(self, candidates: Iterable, query: str) -> RankedResults:
        return rank(candidates, query, self.history, self.clock(), self.config)
