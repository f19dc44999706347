"""
Candidate sources - one per front-end.

Each source turns its raw input into Candidate records for the ranker.
"""

from .apps import AppSource
from .clipboard import ClipboardError, ClipboardSource
from .dmenu import DmenuSource

__all__ = [
    "AppSource",
    "ClipboardError",
    "ClipboardSource",
    "DmenuSource",
]
