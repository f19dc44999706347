"""
Candidate records and match results.

Every front-end hands the ranker objects that satisfy the Candidate
protocol; the ranker never checks which kind it got. The three record
types below are independent dataclasses, not a class hierarchy.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Mapping, Optional, Protocol, runtime_checkable


class MatchKind(IntEnum):
    """How a query hit a field. Higher is stronger."""
    FUZZY = 0
    PREFIX = 1              # query is a prefix of a later word in the field
    PREFIX_WORD_START = 2   # field starts with the query
    EXACT = 3


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching a query against one field."""
    matched: bool
    score: int
    kind: MatchKind
    positions: tuple[int, ...] = ()
    field: str = ""


@runtime_checkable
class Candidate(Protocol):
    """What the ranker needs from a searchable item."""
    secondary_fields: ClassVar[frozenset]

    @property
    def identity(self) -> str: ...

    @property
    def fields(self) -> Mapping[str, str]: ...

    @property
    def payload(self) -> str: ...


@dataclass(frozen=True)
class AppCandidate:
    """An XDG desktop entry."""
    app_id: str
    name: str
    exec_name: str = ""
    generic_name: str = ""
    keywords: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    description: str = ""
    command: str = ""
    icon: Optional[str] = None
    terminal: bool = False

    secondary_fields: ClassVar[frozenset] = frozenset({"keywords", "categories", "description"})

    @property
    def identity(self) -> str:
        return self.app_id

    @property
    def fields(self) -> Mapping[str, str]:
        candidates = (
            ("name", self.name),
            ("exec", self.exec_name),
            ("generic_name", self.generic_name),
            ("keywords", " ".join(self.keywords)),
            ("categories", " ".join(self.categories)),
            ("description", self.description),
        )
        return {name: text for name, text in candidates if text}

    @property
    def payload(self) -> str:
        return self.command

    @property
    def display(self) -> str:
        return self.name


@dataclass(frozen=True)
class LineCandidate:
    """One line of dmenu input, already split into columns."""
    line: str
    columns: tuple[str, ...] = ()
    match_texts: tuple[tuple[str, str], ...] = ()
    display: str = ""
    output: str = ""
    line_number: int = 0

    secondary_fields: ClassVar[frozenset] = frozenset()

    @property
    def identity(self) -> str:
        return self.line

    @property
    def fields(self) -> Mapping[str, str]:
        return dict(self.match_texts)

    @property
    def payload(self) -> str:
        return self.output


@dataclass(frozen=True)
class ClipCandidate:
    """A clipboard history row as listed by cclip."""
    rowid: str
    mime_type: str
    preview: str
    tags: tuple[str, ...] = ()

    secondary_fields: ClassVar[frozenset] = frozenset()

    @property
    def identity(self) -> str:
        return self.rowid

    @property
    def fields(self) -> Mapping[str, str]:
        result = {}
        if self.tags:
            result["tags"] = " ".join(self.tags)
        result["preview"] = self.preview
        return result

    @property
    def payload(self) -> str:
        return self.rowid

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def display(self) -> str:
        text = self.preview or f"[{self.mime_type}]"
        if self.tags:
            return f"[{', '.join(self.tags)}] {text}"
        return text
