"""Greedy subsequence matcher used for keyword search and the interactive selector.

The matcher walks the haystack once, consuming query characters in order.
Consecutive hits are grouped into runs (``MatchSpan``) and the score is the
total length of all runs. Every consumed query character lands in some run,
so a successful match scores the number of non-space query characters and
``rank`` mostly falls back to catalogue order.

The scan is greedy: the first occurrence of each query character is taken.
That is cheap and good enough for ranking a catalogue, but it is not a
globally optimal alignment. For ``"aab"`` / ``"ab"`` the result is two runs
(``a`` then ``b``) even though ``"ab"`` occurs contiguously later on.
Changing this changes the ordering of search results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class MatchSpan:
    """Half-open ``[start, end)`` range of the haystack that matched."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"({self.start}, {self.end})"


@dataclass(frozen=True)
class MatchResult:
    spans: Tuple[MatchSpan, ...]
    score: int


def _same(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def match(haystack: str, query: str) -> Optional[MatchResult]:
    """Match ``query`` against ``haystack``, ignoring case and spaces in the query.

    Returns ``None`` when the query's non-space characters are not an ordered
    subsequence of ``haystack``. An empty (or all-space) query is a trivial
    match with no spans and a score of 0.
    """
    q = query.replace(" ", "")
    if len(q) > len(haystack):
        return None

    spans: List[MatchSpan] = []
    i = j = 0
    while i < len(haystack) and j < len(q):
        if _same(haystack[i], q[j]):
            start = i
            while i < len(haystack) and j < len(q) and _same(haystack[i], q[j]):
                i += 1
                j += 1
            spans.append(MatchSpan(start, i))
        # The character at ``i`` either failed against q[j] or ended the run.
        i += 1

    if j != len(q):
        return None
    return MatchResult(spans=tuple(spans), score=sum(len(s) for s in spans))


def contains(haystack: str, query: str) -> bool:
    return match(haystack, query) is not None


def spans(haystack: str, query: str) -> List[MatchSpan]:
    result = match(haystack, query)
    return list(result.spans) if result else []


def score(haystack: str, query: str) -> int:
    result = match(haystack, query)
    return result.score if result else 0


def rank(query: str, candidates: Iterable[T], key: Callable[[T], str]) -> List[T]:
    """Keep the candidates whose ``key`` matches ``query``, best score first.

    The sort is stable, so equal scores keep the order of ``candidates``.
    """
    scored: List[Tuple[int, T]] = []
    for candidate in candidates:
        result = match(key(candidate), query)
        if result is not None:
            scored.append((result.score, candidate))
    scored.sort(key=lambda pair: -pair[0])
    return [candidate for _, candidate in scored]


def matched_text(haystack: str, found: Sequence[MatchSpan]) -> str:
    """Concatenate the haystack characters covered by ``found``."""
    return "".join(haystack[s.start:s.end] for s in found)
