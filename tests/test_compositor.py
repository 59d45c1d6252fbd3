"""Tests for geometry compositing of surviving features."""

import pytest
import shapely
from shapely.geometry import box

from sliverforge.core import FeatureWarning, GeometryKernelError, ShapelyKernel
from sliverforge.eliminate import MergeForest, RecordArena, SourceFeature, composite_geometry


class CountingUnionKernel(ShapelyKernel):
    def __init__(self):
        self.unions = 0

    def union(self, geometries):
        self.unions += 1
        return super().union(geometries)


class FailingUnionKernel(ShapelyKernel):
    def union(self, geometries):
        raise GeometryKernelError("union", "topology exception")


def _row(kernel, *geometries):
    features = [SourceFeature(i + 1, {'id': i + 1}, g) for i, g in enumerate(geometries)]
    return RecordArena(features, kernel)


class TestCompositeGeometry:
    """Tests for composite_geometry()."""

    def test_unmerged_record_keeps_original_geometry(self):
        kernel = CountingUnionKernel()
        arena = _row(kernel, box(0, 0, 1, 1), box(1, 0, 2, 1))
        forest = MergeForest(arena, [])

        output = composite_geometry(arena[0], forest)

        assert output.geometry is arena[0].geometry()
        assert output.merged_fids == []
        assert kernel.unions == 0

    def test_merged_geometry_is_union(self):
        arena = _row(ShapelyKernel(), box(0, 0, 1, 1), box(1, 0, 2, 1))
        forest = MergeForest(arena, [1])
        forest.add_edge(1, 0)

        output = composite_geometry(arena[0], forest)

        assert output.fid == 1
        assert output.attributes == {'id': 1}
        assert output.merged_fids == [2]
        assert output.geometry.area == pytest.approx(2.0)
        assert output.geometry.equals(box(0, 0, 2, 1))

    def test_transitive_merge(self):
        arena = _row(ShapelyKernel(), box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1))
        forest = MergeForest(arena, [0, 1])
        forest.add_edge(0, 1)
        forest.add_edge(1, 2)

        output = composite_geometry(arena[2], forest)
        assert output.merged_fids == [2, 1]
        assert output.geometry.equals(box(0, 0, 3, 1))

    def test_spatial_reference_reattached(self):
        target = shapely.set_srid(box(0, 0, 1, 1), 2056)
        arena = _row(ShapelyKernel(), target, box(1, 0, 2, 1))
        forest = MergeForest(arena, [1])
        forest.add_edge(1, 0)

        output = composite_geometry(arena[0], forest)
        assert shapely.get_srid(output.geometry) == 2056

    def test_union_failure_omits_feature(self):
        arena = _row(FailingUnionKernel(), box(0, 0, 1, 1), box(1, 0, 2, 1))
        forest = MergeForest(arena, [1])
        forest.add_edge(1, 0)

        with pytest.warns(FeatureWarning, match="union"):
            assert composite_geometry(arena[0], forest) is None

    def test_record_without_geometry(self):
        arena = _row(ShapelyKernel(), None)
        forest = MergeForest(arena, [])
        with pytest.warns(FeatureWarning):
            assert composite_geometry(arena[0], forest) is None

    def test_attributes_are_a_copy(self):
        arena = _row(ShapelyKernel(), box(0, 0, 1, 1))
        output = composite_geometry(arena[0], MergeForest(arena, []))
        output.attributes['id'] = 99
        assert arena[0].attributes == {'id': 1}
