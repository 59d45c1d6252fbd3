"""Tests for the bulk-loaded spatial index."""

import math

from sliverforge.core.spatial_utils import SpatialIndex, bounds_are_finite


class TestSpatialIndex:
    """Tests for SpatialIndex."""

    def test_empty_index_returns_nothing(self):
        index = SpatialIndex()
        assert index.query((0, 0, 1, 1)) == []
        assert len(index) == 0

    def test_query_returns_bbox_candidates(self):
        index = SpatialIndex()
        index.insert('a', (0, 0, 1, 1))
        index.insert('b', (1, 0, 2, 1))
        index.insert('c', (5, 5, 6, 6))

        assert index.query((0.5, 0.5, 1.0, 1.0)) == ['a', 'b']

    def test_touching_boxes_are_candidates(self):
        """Boxes sharing only an edge or corner still intersect."""
        index = SpatialIndex()
        index.insert(0, (1, 1, 2, 2))
        assert index.query((0, 0, 1, 1)) == [0]

    def test_results_in_insertion_order(self):
        index = SpatialIndex()
        for i in range(20):
            index.insert(i, (i, 0, i + 1, 1))
        result = index.query((0, 0, 20, 1))
        assert result == list(range(20))

    def test_non_finite_bounds_rejected(self):
        index = SpatialIndex()
        assert not index.insert('empty', (math.nan, math.nan, math.nan, math.nan))
        assert len(index) == 0
        assert index.query((math.nan, 0, 1, 1)) == []

    def test_insert_after_query_rebuilds(self):
        index = SpatialIndex()
        index.insert(0, (0, 0, 1, 1))
        assert index.query((0, 0, 3, 3)) == [0]
        index.insert(1, (2, 2, 3, 3))
        assert index.query((0, 0, 3, 3)) == [0, 1]

    def test_close_clears_entries(self):
        index = SpatialIndex()
        index.insert(0, (0, 0, 1, 1))
        index.close()
        assert len(index) == 0
        assert index.query((0, 0, 1, 1)) == []


def test_bounds_are_finite():
    assert bounds_are_finite((0, 0, 1, 1))
    assert not bounds_are_finite((0, 0, math.inf, 1))
    assert not bounds_are_finite((math.nan, 0, 1, 1))
