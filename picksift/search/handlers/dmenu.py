"""
Dmenu Source - stdin lines as ranking candidates.

Reads newline- or NUL-separated input, drops blank lines, and projects
each line through a ColumnProjector.
"""

from typing import Iterable, Optional, TextIO

from ..candidates import LineCandidate
from ..columns import ColumnProjector


class DmenuSource:
    """Build LineCandidates from raw input lines."""

    name = "dmenu"

    def __init__(self, projector: Optional[ColumnProjector] = None):
        self.projector = projector or ColumnProjector()

    def from_lines(self, lines: Iterable[str]) -> list[LineCandidate]:
        """
        Args:
            lines: Raw lines, with or without trailing newlines

        Returns:
            One candidate per non-blank line; line numbers are 1-based
            positions in the original input
        """
        candidates = []
        for number, line in enumerate(lines, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            candidates.append(self.projector.candidate(line, number))
        return candidates

    def read(self, stream: TextIO, null_separated: bool = False) -> list[LineCandidate]:
        """Read all of stream and build candidates."""
        if null_separated:
            return self.from_lines(stream.read().split("\0"))
        return self.from_lines(stream)
