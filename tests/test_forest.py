"""Tests for the merge forest and transitive collection."""

import pytest
from shapely.geometry import box

from sliverforge.core import ShapelyKernel
from sliverforge.eliminate import MergeForest, RecordArena, SourceFeature


def _arena(count):
    return RecordArena(
        [SourceFeature(i + 1, {}, box(i, 0, i + 1, 1)) for i in range(count)],
        ShapelyKernel(),
    )


class TestAddEdge:
    """Tests for MergeForest.add_edge()."""

    def test_edge_updates_parent_and_children(self):
        arena = _arena(3)
        forest = MergeForest(arena, [1])
        forest.add_edge(1, 0)

        assert forest.parent_of(1) == 0
        assert arena[0].children == [1]
        assert len(forest) == 1

    def test_kept_record_cannot_get_parent(self):
        forest = MergeForest(_arena(3), [1])
        with pytest.raises(ValueError, match="not marked for elimination"):
            forest.add_edge(0, 1)

    def test_single_parent_only(self):
        forest = MergeForest(_arena(3), [1])
        forest.add_edge(1, 0)
        with pytest.raises(ValueError, match="already merges"):
            forest.add_edge(1, 2)

    def test_self_edge_refused(self):
        forest = MergeForest(_arena(2), [0])
        assert forest.would_create_cycle(0, 0)
        with pytest.raises(ValueError, match="cycle"):
            forest.add_edge(0, 0)

    def test_cycle_refused(self):
        forest = MergeForest(_arena(4), [0, 1, 2])
        forest.add_edge(0, 1)
        forest.add_edge(1, 2)
        assert forest.would_create_cycle(2, 0)
        assert not forest.would_create_cycle(2, 3)
        with pytest.raises(ValueError, match="cycle"):
            forest.add_edge(2, 0)


class TestAllMergedInto:
    """Tests for MergeForest.all_merged_into()."""

    def test_no_children(self):
        forest = MergeForest(_arena(2), [1])
        assert forest.all_merged_into(0) == []

    def test_chain(self):
        """A -> B -> C collects B and A into C."""
        forest = MergeForest(_arena(3), [0, 1])
        forest.add_edge(0, 1)
        forest.add_edge(1, 2)

        assert forest.all_merged_into(2) == [1, 0]
        assert forest.all_merged_into(1) == [0]
        assert forest.terminal_of(0) == 2

    def test_depth_first_in_edge_order(self):
        forest = MergeForest(_arena(5), [0, 1, 3, 4])
        forest.add_edge(0, 2)
        forest.add_edge(1, 2)
        forest.add_edge(3, 0)
        forest.add_edge(4, 3)

        assert forest.all_merged_into(2) == [0, 3, 4, 1]

    def test_never_revisits(self):
        """Corrupted child links must not loop or duplicate."""
        arena = _arena(3)
        forest = MergeForest(arena, [0, 1, 2])
        arena[0].children.extend([1, 2])
        arena[1].children.extend([0, 2])
        arena[2].children.append(1)

        result = forest.all_merged_into(0)
        assert sorted(result) == [1, 2]
        assert len(result) == len(set(result))


class TestUnreachable:
    """Tests for MergeForest.unreachable()."""

    def test_chain_ending_in_eliminated_record(self):
        forest = MergeForest(_arena(4), [0, 1])
        forest.add_edge(0, 1)
        assert forest.unreachable([2, 3]) == [0]

    def test_all_reach_survivors(self):
        forest = MergeForest(_arena(3), [0, 1])
        forest.add_edge(0, 1)
        forest.add_edge(1, 2)
        assert forest.unreachable([2]) == []
