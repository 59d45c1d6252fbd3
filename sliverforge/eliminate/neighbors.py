"""Neighbour discovery for features marked for elimination.

Candidates come from the spatial index (bounding-box overlap only) and are
confirmed with the exact ``touches`` predicate evaluated on the eliminated
feature's prepared geometry. Each confirmed neighbour is recorded together
with the length of the boundary both features share.
"""

from __future__ import annotations

import warnings
from typing import List, Tuple

from ..core.errors import FeatureWarning, GeometryKernelError, NoNeighborWarning
from ..core.spatial_utils import SpatialIndex
from .record import FeatureRecord, RecordArena


def index_records(arena: RecordArena, index: SpatialIndex) -> int:
    """Insert every record that has a usable geometry into ``index``.

    Records without geometry are skipped; :meth:`FeatureRecord.geometry`
    has already warned about them.

    Returns:
        Number of records inserted
    """
    kernel = arena.kernel
    inserted = 0
    for record in arena:
        geometry = record.geometry()
        if geometry is None:
            continue
        if index.insert(record.index, kernel.bounds(geometry)):
            inserted += 1
    return inserted


def shared_boundary_length(record: FeatureRecord, other: FeatureRecord, arena: RecordArena) -> float:
    """Length of the intersection of two touching records.

    Features meeting only at isolated points intersect in a point, which has
    no length; a failed intersection or length computation also counts as 0.
    """
    kernel = arena.kernel
    try:
        boundary = kernel.intersection(record.geometry(), other.geometry())
        return kernel.length(boundary)
    except GeometryKernelError as e:
        warnings.warn(
            FeatureWarning(
                f"Feature {record.fid}: boundary length with feature {other.fid} failed ({e})",
                fid=record.fid,
            ),
            stacklevel=2,
        )
        return 0.0


def discover_neighbors(
    record: FeatureRecord,
    arena: RecordArena,
    index: SpatialIndex,
) -> List[Tuple[int, float]]:
    """Find the features that touch ``record`` and store them on it.

    Neighbours are returned (and stored in ``record.neighbors``) in
    discovery order, which is the arena order of the candidates.

    Args:
        record: Feature marked for elimination
        arena: All loaded records
        index: Spatial index built over ``arena``

    Returns:
        List of ``(arena index, shared boundary length)`` pairs; empty if the
        feature has no touching neighbour, in which case a
        :class:`NoNeighborWarning` is emitted.
    """
    kernel = arena.kernel
    prepared = record.prepared_geometry()
    if prepared is None:
        return []

    candidates = [i for i in index.query(kernel.bounds(record.geometry())) if i != record.index]

    neighbors: List[Tuple[int, float]] = []
    for candidate_index in candidates:
        candidate = arena[candidate_index]
        try:
            touching = kernel.touches(prepared, candidate.geometry())
        except GeometryKernelError as e:
            warnings.warn(
                FeatureWarning(
                    f"Feature {record.fid}: touch test against feature {candidate.fid} failed ({e})",
                    fid=record.fid,
                ),
                stacklevel=2,
            )
            continue
        if touching:
            neighbors.append((candidate_index, shared_boundary_length(record, candidate, arena)))

    record.neighbors = neighbors

    if not neighbors:
        reason = "no candidates in index" if not candidates else "no touching candidates"
        warnings.warn(
            NoNeighborWarning(
                f"Feature {record.fid}: no neighbors found ({reason}); feature is dropped",
                fid=record.fid,
            ),
            stacklevel=2,
        )
    return neighbors


__all__ = [
    'index_records',
    'shared_boundary_length',
    'discover_neighbors',
]
