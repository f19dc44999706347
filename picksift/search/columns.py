"""
Column Projector - Split dmenu lines into columns.

Column indices are 1-based. Three independent selections decide which
columns are matched against, shown, and printed on selection:

  match_fields    default: the whole line as one field
  display_fields  default: the whole line
  output_fields   default: the whole raw line

The line is split literally on the delimiter, so consecutive delimiters
give empty columns in their positions. Asking for a column past the end
of a line gives an empty string rather than an error.
"""

from typing import Optional, Sequence

from ..config import DmenuConfig
from .candidates import LineCandidate


class ColumnProjector:
    """Project raw lines onto match/display/output columns."""

    def __init__(
        self,
        delimiter: str = " ",
        match_fields: Optional[Sequence[int]] = None,
        display_fields: Optional[Sequence[int]] = None,
        output_fields: Optional[Sequence[int]] = None,
    ):
        self.delimiter = delimiter
        self.match_fields = tuple(match_fields) if match_fields else None
        self.display_fields = tuple(display_fields) if display_fields else None
        self.output_fields = tuple(output_fields) if output_fields else None

    @classmethod
    def from_config(cls, config: DmenuConfig) -> "ColumnProjector":
        return cls(
            delimiter=config.delimiter,
            match_fields=config.match_fields,
            display_fields=config.display_fields,
            output_fields=config.output_fields,
        )

    def project(self, raw_line: str) -> list[str]:
        """Split a line into its columns."""
        return raw_line.split(self.delimiter)

    @staticmethod
    def column(columns: Sequence[str], index: int) -> str:
        """1-based column lookup; out of range gives ""."""
        if 1 <= index <= len(columns):
            return columns[index - 1]
        return ""

    def match_texts(self, raw_line: str, columns: Sequence[str]) -> dict[str, str]:
        """Fields fed to the matcher, keyed "line" or "col<N>"."""
        if self.match_fields is None:
            return {"line": raw_line}
        return {f"col{index}": self.column(columns, index) for index in self.match_fields}

    def display(self, raw_line: str, columns: Sequence[str]) -> str:
        if self.display_fields is None:
            return raw_line.replace("\t", "  ")
        return " ".join(self.column(columns, index) for index in self.display_fields)

    def output(self, raw_line: str, columns: Sequence[str]) -> str:
        if self.output_fields is None:
            return raw_line
        return self.delimiter.join(self.column(columns, index) for index in self.output_fields)

    def candidate(self, raw_line: str, line_number: int = 0) -> LineCandidate:
        """Build the LineCandidate for one input line."""
        columns = self.project(raw_line)
        return LineCandidate(
            line=raw_line,
            columns=tuple(columns),
            match_texts=tuple(self.match_texts(raw_line, columns).items()),
            display=self.display(raw_line, columns),
            output=self.output(raw_line, columns),
            line_number=line_number,
        )
