"""Replaced-span registry.

Nested accesses such as `a.B.C` produce several candidate spans that nest.
Each accepted finding registers its span; any later candidate that starts
inside, or overlaps, a registered span is dropped. Accepted spans never
overlap, so per file they form a sorted list of disjoint intervals and
both queries are a single bisection.
"""

from bisect import bisect_right, insort
from collections import defaultdict

from protogetter.analyzers.base import Span


class PosFilter:
    """Run-scoped registry of spans that already produced a finding."""

    def __init__(self):
        self._starts: dict[str, list[int]] = defaultdict(list)
        self._ends: dict[str, dict[int, int]] = defaultdict(dict)

    def __len__(self) -> int:
        return sum(len(starts) for starts in self._starts.values())

    def _last_starting_before(self, path: str, offset: int) -> int | None:
        """Start of the registered span with the greatest start < offset."""
        starts = self._starts.get(path)
        if not starts:
            return None
        i = bisect_right(starts, offset - 1)
        if i == 0:
            return None
        return starts[i - 1]

    def is_filtered(self, path: str, offset: int) -> bool:
        """True if the offset lies inside a registered span."""
        start = self._last_starting_before(path, offset + 1)
        return start is not None and offset < self._ends[path][start]

    def is_already_replaced(self, span: Span) -> bool:
        """True if the span overlaps any registered span."""
        start = self._last_starting_before(span.path, span.end)
        return start is not None and self._ends[span.path][start] > span.start

    def register(self, span: Span) -> None:
        if self.is_already_replaced(span):
            raise ValueError(f"span {span} overlaps an accepted finding")
        insort(self._starts[span.path], span.start)
        self._ends[span.path][span.start] = span.end
