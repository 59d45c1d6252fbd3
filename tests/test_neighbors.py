"""Tests for neighbour discovery."""

import pytest
from shapely.geometry import Polygon, box

from sliverforge.core import NoNeighborWarning, ShapelyKernel, SpatialIndex
from sliverforge.eliminate import RecordArena, SourceFeature, discover_neighbors, index_records


def _arena(*geometries):
    features = [SourceFeature(i + 1, {}, geom) for i, geom in enumerate(geometries)]
    arena = RecordArena(features, ShapelyKernel())
    index = SpatialIndex()
    index_records(arena, index)
    return arena, index


class TestIndexRecords:
    """Tests for index_records()."""

    def test_records_without_geometry_are_skipped(self):
        features = [
            SourceFeature(1, {}, box(0, 0, 1, 1)),
            SourceFeature(2, {}, None),
            SourceFeature(3, {}, box(1, 0, 2, 1)),
        ]
        arena = RecordArena(features, ShapelyKernel())
        index = SpatialIndex()
        with pytest.warns(UserWarning):
            inserted = index_records(arena, index)
        assert inserted == 2
        assert index.query((0, 0, 2, 1)) == [0, 2]


class TestDiscoverNeighbors:
    """Tests for discover_neighbors()."""

    def test_row_of_squares(self):
        arena, index = _arena(box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1))
        neighbors = discover_neighbors(arena[1], arena, index)

        assert [i for i, _ in neighbors] == [0, 2]
        assert [length for _, length in neighbors] == pytest.approx([1.0, 1.0])
        assert arena[1].neighbors == neighbors

    def test_record_is_not_its_own_neighbor(self):
        arena, index = _arena(box(0, 0, 1, 1), box(1, 0, 2, 1))
        neighbors = discover_neighbors(arena[0], arena, index)
        assert [i for i, _ in neighbors] == [1]

    def test_partial_shared_edge_length(self):
        arena, index = _arena(box(0, 0, 2, 2), box(2, 1, 3, 1.5))
        neighbors = discover_neighbors(arena[0], arena, index)
        assert neighbors[0][1] == pytest.approx(0.5)

    def test_corner_touch_has_zero_length(self):
        """Polygons meeting at a single point still count as touching."""
        arena, index = _arena(box(0, 0, 1, 1), box(1, 1, 2, 2))
        neighbors = discover_neighbors(arena[0], arena, index)
        assert neighbors == [(1, 0.0)]

    def test_overlapping_polygons_are_not_neighbors(self):
        arena, index = _arena(box(0, 0, 1, 1), box(0.5, 0, 1.5, 1), box(1.5, 0, 2, 1))
        with pytest.warns(NoNeighborWarning):
            neighbors = discover_neighbors(arena[0], arena, index)
        assert neighbors == []

    def test_bbox_candidate_that_does_not_touch(self):
        triangle = Polygon([(0.5, 2), (2, 0.5), (2, 2)])
        arena, index = _arena(box(0, 0, 1, 1), triangle)
        with pytest.warns(NoNeighborWarning, match="no touching candidates"):
            assert discover_neighbors(arena[0], arena, index) == []

    def test_isolated_feature(self):
        arena, index = _arena(box(0, 0, 1, 1), box(5, 5, 6, 6))
        with pytest.warns(NoNeighborWarning, match="Feature 1: no neighbors found"):
            assert discover_neighbors(arena[0], arena, index) == []
        assert arena[0].neighbors == []

    def test_feature_without_geometry(self):
        features = [SourceFeature(1, {}, None), SourceFeature(2, {}, box(0, 0, 1, 1))]
        arena = RecordArena(features, ShapelyKernel())
        index = SpatialIndex()
        with pytest.warns(UserWarning):
            index_records(arena, index)
            assert discover_neighbors(arena[0], arena, index) == []
