# Picksift Services Package
"""
Backend services for picksift.

Services handle usage history persistence and frecency scoring.
"""

from .frecency import FrecencyCalculator, frecency_boost
from .history import HistoryRecord, HistoryStore, MemoryHistoryStore

__all__ = [
    "FrecencyCalculator",
    "frecency_boost",
    "HistoryRecord",
    "HistoryStore",
    "MemoryHistoryStore",
]
