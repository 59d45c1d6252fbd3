"""Spatial indexing utilities.

This module wraps Shapely's STRtree for bounding-box candidate searches so
neighbour discovery never has to compare every pair of features (O(n log n)
instead of O(n²)).
"""

from typing import Hashable, List, Optional, Tuple

import numpy as np
import shapely
from shapely.strtree import STRtree

Bounds = Tuple[float, float, float, float]


def bounds_are_finite(bounds: Bounds) -> bool:
    """Return True if all four bounding-box coordinates are finite numbers."""
    return bool(np.all(np.isfinite(np.asarray(bounds, dtype=float))))


class SpatialIndex:
    """Bulk-loaded bounding-box index over arbitrary items.

    Items are registered with :meth:`insert` and the STRtree is built on
    the first :meth:`query`, so the whole index is loaded in one pass. The
    index stores envelopes only, never the geometries themselves. Queries
    return candidates whose bounding box intersects the query box; exact
    topological filtering is the caller's job.

    Inserting after the first query rebuilds the tree on the next query.

    Args:
        node_capacity: Maximum number of entries per STRtree node (default: 10)

    Examples:
        >>> index = SpatialIndex()
        >>> index.insert(0, (0, 0, 1, 1))
        >>> index.insert(1, (1, 0, 2, 1))
        >>> index.insert(2, (5, 5, 6, 6))
        >>> index.query((0.5, 0.5, 1.0, 1.0))
        [0, 1]
    """

    def __init__(self, node_capacity: int = 10):
        self.node_capacity = node_capacity
        self._items: List[Hashable] = []
        self._boxes: List = []
        self._tree: Optional[STRtree] = None

    def __len__(self) -> int:
        return len(self._items)

    def insert(self, item: Hashable, bounds: Bounds) -> bool:
        """Register ``item`` under its bounding box.

        Returns:
            False if ``bounds`` is not finite (empty geometry) and the item
            was not inserted, True otherwise.
        """
        if not bounds_are_finite(bounds):
            return False
        self._items.append(item)
        self._boxes.append(shapely.box(*bounds))
        self._tree = None
        return True

    def query(self, bounds: Bounds) -> List[Hashable]:
        """Return every inserted item whose box intersects ``bounds``.

        Items come back in insertion order, which keeps downstream
        tie-breaking independent of the tree layout.
        """
        if not self._items or not bounds_are_finite(bounds):
            return []
        if self._tree is None:
            self._tree = STRtree(self._boxes, node_capacity=self.node_capacity)

        positions = np.sort(self._tree.query(shapely.box(*bounds)))
        return [self._items[i] for i in positions]

    def close(self) -> None:
        """Drop the tree and every entry."""
        self._tree = None
        self._items = []
        self._boxes = []


__all__ = [
    'SpatialIndex',
    'bounds_are_finite',
]
