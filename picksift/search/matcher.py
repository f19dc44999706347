"""
Field Matcher - Score a query against one text field.

Short queries (len <= prefix_depth) first try the strong kinds:
  - EXACT:             field equals the query
  - PREFIX_WORD_START: field starts with the query
  - PREFIX:            query is a prefix of a later word in the field
Longer queries, and short ones that hit none of the above, fall back to
fuzzy subsequence matching. In exact match mode the depth is ignored and
the fuzzy fallback is disabled.

Fuzzy scoring finds the best alignment of the query characters in the
field with a small dynamic programme:
  + SCORE_MATCH per matched character
  + BONUS_CONSECUTIVE for each character directly after the previous one
  + BONUS_BOUNDARY when a run of matches starts at a word boundary
  - affine gap penalty between runs
  - PENALTY_LEADING per character skipped before the first match
  - a small penalty on the field's length
Consecutive runs are worth more than boundary hits, so an earlier, more
contiguous alignment never loses to a later, gappier one.

All comparisons are case-insensitive. Lowercasing is done per character
so match positions line up with the original text.
"""

from dataclasses import dataclass
from typing import Optional

from rapidfuzz.distance import LCSseq

from .candidates import MatchKind, MatchResult

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 12
BONUS_BOUNDARY = 6
PENALTY_GAP_START = 4
PENALTY_GAP_EXTENSION = 1
PENALTY_LEADING = 1
MAX_LEADING_PENALTY = 15
LENGTH_PENALTY_STEP = 10
MAX_LENGTH_PENALTY = 10

# Added to the best field's score for every other field that also matched
MULTI_FIELD_BONUS = 4

_NEG = -(10 ** 9)
_QUOTES = ("'", '"')

EMPTY_MATCH = MatchResult(matched=True, score=0, kind=MatchKind.FUZZY)


def _fold(text: str) -> str:
    """Lowercase character by character, keeping the string length."""
    out = []
    for c in text:
        lower = c.lower()
        out.append(lower if len(lower) == 1 else c)
    return "".join(out)


def _word_starts(text: str) -> list[bool]:
    """True at every index that begins a word."""
    starts = []
    prev = ""
    for c in text:
        starts.append(
            not prev
            or not prev.isalnum()
            or (prev.islower() and c.isupper())
        )
        prev = c
    return starts


def _length_penalty(length: int) -> int:
    return min(length // LENGTH_PENALTY_STEP, MAX_LENGTH_PENALTY)


def _leading_penalty(first: int) -> int:
    return min(first * PENALTY_LEADING, MAX_LEADING_PENALTY)


def _gap_penalty(gap: int) -> int:
    return PENALTY_GAP_START + PENALTY_GAP_EXTENSION * (gap - 1)


def score_positions(text: str, positions: tuple[int, ...]) -> int:
    """Score a known alignment with the same weights the fuzzy search uses."""
    if not positions:
        return 0
    starts = _word_starts(text)
    score = -_leading_penalty(positions[0]) - _length_penalty(len(text))
    prev = None
    for pos in positions:
        score += SCORE_MATCH
        if prev is not None and pos == prev + 1:
            score += BONUS_CONSECUTIVE
        else:
            if prev is not None:
                score -= _gap_penalty(pos - prev - 1)
            if starts[pos]:
                score += BONUS_BOUNDARY
        prev = pos
    return score


def _fuzzy(query: str, text: str, folded_text: str) -> Optional[tuple[int, tuple[int, ...]]]:
    """
    Best subsequence alignment of query in text.

    Returns:
        (score, positions) or None if query is not a subsequence
    """
    m, n = len(query), len(text)
    if m > n:
        return None
    # Cheap reject in C before the quadratic alignment
    if LCSseq.similarity(query, folded_text) < m:
        return None

    starts = _word_starts(text)
    # score[i][j]: best score with query[i] matched at text[j]
    score = [[_NEG] * n for _ in range(m)]
    # back[i][j]: text index of query[i-1] in that best alignment
    back = [[-1] * n for _ in range(m)]

    qc = query[0]
    for j in range(n - m + 1):
        if folded_text[j] == qc:
            score[0][j] = SCORE_MATCH - _leading_penalty(j) + (BONUS_BOUNDARY if starts[j] else 0)

    for i in range(1, m):
        qc = query[i]
        prev_row = score[i - 1]
        row = score[i]
        back_row = back[i]
        gap_best = _NEG
        gap_best_k = -1
        for j in range(i, n - m + i + 1):
            # Candidates ending at k <= j - 2 leave a gap before j
            if j >= 2:
                k = j - 2
                gap_best -= PENALTY_GAP_EXTENSION
                if prev_row[k] > _NEG and prev_row[k] - PENALTY_GAP_START >= gap_best:
                    gap_best = prev_row[k] - PENALTY_GAP_START
                    gap_best_k = k
            if folded_text[j] != qc:
                continue

            best = _NEG
            best_k = -1
            if prev_row[j - 1] > _NEG:
                best = prev_row[j - 1] + SCORE_MATCH + BONUS_CONSECUTIVE
                best_k = j - 1
            if gap_best > _NEG:
                candidate = gap_best + SCORE_MATCH + (BONUS_BOUNDARY if starts[j] else 0)
                if candidate > best:
                    best = candidate
                    best_k = gap_best_k
            if best_k >= 0:
                row[j] = best
                back_row[j] = best_k

    last_row = score[m - 1]
    end = -1
    for j in range(m - 1, n):
        if last_row[j] > _NEG and (end < 0 or last_row[j] > last_row[end]):
            end = j
    if end < 0:
        return None

    positions = [end]
    for i in range(m - 1, 0, -1):
        positions.append(back[i][positions[-1]])
    positions.reverse()

    return last_row[end] - _length_penalty(n), tuple(positions)


def _strong_match(query: str, text: str, folded_text: str) -> Optional[MatchResult]:
    """Exact, field-prefix or word-prefix match, if any."""
    m = len(query)
    if folded_text == query:
        kind, start = MatchKind.EXACT, 0
    elif folded_text.startswith(query):
        kind, start = MatchKind.PREFIX_WORD_START, 0
    else:
        starts = _word_starts(text)
        start = next(
            (j for j in range(1, len(text) - m + 1)
             if starts[j] and folded_text.startswith(query, j)),
            -1,
        )
        if start < 0:
            return None
        kind = MatchKind.PREFIX

    positions = tuple(range(start, start + m))
    return MatchResult(
        matched=True,
        score=score_positions(text, positions),
        kind=kind,
        positions=positions,
    )


def _unquote(query: str) -> Optional[str]:
    if len(query) >= 2 and query[0] in _QUOTES and query[-1] == query[0]:
        return query[1:-1]
    return None


def match_field(
    query: str,
    text: str,
    prefix_depth: int = 3,
    match_mode: str = "fuzzy",
) -> Optional[MatchResult]:
    """
    Match a query against one field.

    Args:
        query: What the user typed
        text: Field text
        prefix_depth: Longest query that still gets exact/prefix kinds
        match_mode: "fuzzy" or "exact"

    Returns:
        MatchResult, or None when the field doesn't match
    """
    if not query:
        return EMPTY_MATCH

    if match_mode == "exact":
        inner = _unquote(query)
        if inner is not None:
            if not inner:
                return EMPTY_MATCH
            folded = _fold(inner)
            if _fold(text) != folded:
                return None
            positions = tuple(range(len(text)))
            return MatchResult(True, score_positions(text, positions), MatchKind.EXACT, positions)
        return _strong_match(_fold(query), text, _fold(text))

    folded_query = _fold(query)
    folded_text = _fold(text)

    if len(query) <= prefix_depth:
        strong = _strong_match(folded_query, text, folded_text)
        if strong is not None:
            return strong

    found = _fuzzy(folded_query, text, folded_text)
    if found is None:
        return None
    score, positions = found
    return MatchResult(matched=True, score=score, kind=MatchKind.FUZZY, positions=positions)


@dataclass(frozen=True)
class CandidateMatch:
    """Best field hit for a candidate, plus how many fields matched."""
    result: MatchResult
    secondary: bool = False
    matched_fields: int = 1

    @property
    def kind(self) -> MatchKind:
        return self.result.kind

    @property
    def field(self) -> str:
        return self.result.field

    @property
    def score(self) -> int:
        return self.result.score + MULTI_FIELD_BONUS * (self.matched_fields - 1)


EMPTY_CANDIDATE_MATCH = CandidateMatch(EMPTY_MATCH)


def match_candidate(
    query: str,
    candidate,
    prefix_depth: int = 3,
    match_mode: str = "fuzzy",
) -> Optional[CandidateMatch]:
    """
    Match a query against every field of a candidate.

    The best field is the one that lands the candidate in the highest
    tier: primary fields beat secondary ones, then stronger kinds win,
    then the higher score. Each other matching field adds
    MULTI_FIELD_BONUS.

    Returns:
        CandidateMatch, or None if no field matched
    """
    if not query:
        return EMPTY_CANDIDATE_MATCH

    secondary_fields = candidate.secondary_fields
    best = None
    best_key = None
    matched = 0

    for name, text in candidate.fields.items():
        result = match_field(query, text, prefix_depth, match_mode)
        if result is None:
            continue
        matched += 1
        secondary = name in secondary_fields
        key = (not secondary, result.kind, result.score)
        if best_key is None or key > best_key:
            best_key = key
            best = CandidateMatch(
                MatchResult(result.matched, result.score, result.kind, result.positions, name),
                secondary=secondary,
            )

    if best is None:
        return None
    return CandidateMatch(best.result, best.secondary, matched)
