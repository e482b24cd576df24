"""Tests for the replaced-span registry."""

import pytest

from protogetter.analyzers.base import Span
from protogetter.analyzers.pos_filter import PosFilter


class TestPosFilter:
    """Test containment and overlap queries."""

    @pytest.fixture
    def pos_filter(self):
        pos_filter = PosFilter()
        pos_filter.register(Span("a.go", 10, 20))
        pos_filter.register(Span("a.go", 40, 50))
        return pos_filter

    def test_empty_filter(self):
        pos_filter = PosFilter()

        assert not pos_filter.is_filtered("a.go", 0)
        assert not pos_filter.is_already_replaced(Span("a.go", 0, 5))
        assert len(pos_filter) == 0

    @pytest.mark.parametrize("offset", [10, 15, 19, 40, 49])
    def test_offsets_inside(self, pos_filter, offset):
        assert pos_filter.is_filtered("a.go", offset)

    @pytest.mark.parametrize("offset", [0, 9, 20, 30, 39, 50, 100])
    def test_offsets_outside(self, pos_filter, offset):
        assert not pos_filter.is_filtered("a.go", offset)

    @pytest.mark.parametrize(
        "start, end",
        [(12, 18), (5, 11), (19, 25), (0, 100), (10, 20), (45, 60)],
    )
    def test_overlapping_spans(self, pos_filter, start, end):
        assert pos_filter.is_already_replaced(Span("a.go", start, end))

    @pytest.mark.parametrize("start, end", [(0, 10), (20, 40), (50, 60), (25, 30)])
    def test_disjoint_spans(self, pos_filter, start, end):
        """Adjacent spans do not overlap: ranges are half-open."""
        assert not pos_filter.is_already_replaced(Span("a.go", start, end))

    def test_paths_are_independent(self, pos_filter):
        assert not pos_filter.is_filtered("b.go", 15)
        assert not pos_filter.is_already_replaced(Span("b.go", 10, 20))

    def test_register_out_of_order(self, pos_filter):
        pos_filter.register(Span("a.go", 25, 30))
        pos_filter.register(Span("a.go", 0, 5))

        assert len(pos_filter) == 4
        assert pos_filter.is_filtered("a.go", 27)
        assert pos_filter.is_filtered("a.go", 0)
        assert not pos_filter.is_filtered("a.go", 22)

    def test_register_overlap_rejected(self, pos_filter):
        with pytest.raises(ValueError):
            pos_filter.register(Span("a.go", 15, 45))

    def test_span_validation(self):
        with pytest.raises(ValueError):
            Span("a.go", 10, 5)
