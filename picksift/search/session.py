"""
Search Session - What a front-end's UI loop drives.

Holds the current query and results for one mode. Every query edit
re-ranks the full candidate set synchronously, so a ranking always runs
to completion before the next input event is handled. Selection and pin
toggles are the only paths that write to the history store.

Candidates may still be arriving (desktop entry discovery runs alongside
the first render); add_candidates() re-ranks whatever is available and
the results are marked incomplete until discovery reports done.
"""

import time
from typing import Iterable, Optional

from loguru import logger

from ..config import EngineConfig
from .ranking import RankedResults, rank


class SearchSession:
    """Query state, ranked results and selection handling for one mode."""

    def __init__(
        self,
        candidates: Iterable = (),
        history=None,
        config: Optional[EngineConfig] = None,
        clock=time.time,
        loading: bool = False,
    ):
        self.history = history
        self.config = config or EngineConfig()
        self.clock = clock
        self.loading = loading

        self._candidates = list(candidates)
        self.query = ""
        self.results = RankedResults("")
        self.refresh()

    @property
    def candidates(self) -> list:
        return list(self._candidates)

    def refresh(self) -> RankedResults:
        """Re-rank the current candidates against the current query."""
        ranked = rank(
            self._candidates, self.query, self.history, self.clock(), self.config
        )
        self.results = RankedResults(self.query, ranked, complete=not self.loading)
        return self.results

    def set_query(self, query: str) -> RankedResults:
        """Handle a query edit (keystroke, backspace, paste)."""
        self.query = query
        return self.refresh()

    def add_candidates(self, candidates: Iterable, done: bool = False) -> RankedResults:
        """Append newly discovered candidates and re-rank."""
        self._candidates.extend(candidates)
        if done:
            self.loading = False
        return self.refresh()

    def select(self, index: int = 0) -> Optional[str]:
        """
        Confirm the result at index.

        Records the use in history and returns the candidate's payload,
        or None if there is nothing at that index.
        """
        if not 0 <= index < len(self.results):
            return None
        candidate = self.results[index].candidate
        if self.history is not None:
            self.history.record_use(candidate.identity, self.clock())
            self.history.flush()
        logger.debug(f"Selected {candidate.identity}")
        return candidate.payload

    def toggle_pin(self, index: int) -> Optional[bool]:
        """Flip the pin on the result at index and re-rank. Returns new state."""
        if self.history is None or not 0 <= index < len(self.results):
            return None
        identity = self.results[index].candidate.identity
        pinned = self.history.toggle_pin(identity)
        self.history.flush()
        logger.debug(f"{'Pinned' if pinned else 'Unpinned'} {identity}")
        self.refresh()
        return pinned
