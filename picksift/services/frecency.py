"""
Frecency - Turn a usage history record into a ranking boost.

  boost = weight * log2(1 + use_count) * 0.5 ** (age / half_life)

The frequency term grows sub-linearly, so a long tail of old launches
can't bury something used a minute ago. The recency term halves every
half_life; anything older than a few half-lives contributes next to
nothing.

The boost is added inside a tier's score range only (see
search.ranking.ScoredCandidate), so it reorders candidates within a tier
and never moves one across a tier boundary.
"""

import math
import time
from dataclasses import dataclass
from typing import Optional

SECONDS_PER_DAY = 24 * 3600

DEFAULT_HALF_LIFE_DAYS = 3.0
DEFAULT_WEIGHT = 100.0


def frecency_boost(
    record,
    now: Optional[float] = None,
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS,
    weight: float = DEFAULT_WEIGHT,
) -> float:
    """
    Calculate the frecency boost for a history record.

    Args:
        record: HistoryRecord or None (never used)
        now: Unix timestamp to measure age against (defaults to time.time())
        half_life_days: Age at which the recency factor halves
        weight: Scale applied to the final boost

    Returns:
        Boost >= 0.0. Records absent from history score 0.0.
    """
    if record is None or record.use_count <= 0 or record.last_used is None:
        return 0.0

    if now is None:
        now = time.time()

    # Clock skew can put last_used in the future; treat that as "just now"
    age_days = max(0.0, now - record.last_used) / SECONDS_PER_DAY

    frequency = math.log2(1 + record.use_count)
    recency = 0.5 ** (age_days / half_life_days)

    return weight * frequency * recency


@dataclass(frozen=True)
class FrecencyCalculator:
    """frecency_boost with its tuning parameters bound."""
    half_life_days: float = DEFAULT_HALF_LIFE_DAYS
    weight: float = DEFAULT_WEIGHT

    @classmethod
    def from_config(cls, config) -> "FrecencyCalculator":
        return cls(half_life_days=config.half_life_days, weight=config.frecency_weight)

    def boost(self, record, now: Optional[float] = None) -> float:
        return frecency_boost(record, now, self.half_life_days, self.weight)
