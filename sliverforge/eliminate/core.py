"""Core elimination orchestration logic."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from ..core.errors import (
    GeometryKernelError,
    MissingFeatureWarning,
    NoNeighborWarning,
    OrphanedMergeWarning,
)
from ..core.kernel import GeometryKernel, ShapelyKernel
from ..core.spatial_utils import SpatialIndex
from ..core.types import MergePolicy, coerce_enum
from ..metrics import area_ratio, total_area
from .compositor import OutputFeature, composite_geometry
from .forest import MergeForest
from .neighbors import discover_neighbors, index_records
from .record import RecordArena, SourceFeature
from .selection import select_merge_target


@dataclass
class EliminationReport:
    """Summary of one elimination run.

    Attributes:
        loaded: Number of features loaded
        kept: Number of features not marked for elimination
        eliminated: Number of loaded features marked for elimination
        merged: Eliminated features absorbed into a surviving feature
        written: Number of output features
        dropped_fids: Eliminated features lost (no neighbour, merge chain
            ending in another eliminated feature, or target omitted)
        omitted_fids: Surviving features left out of the output (no
            geometry, or union failure)
        missing_fids: Requested identifiers not present in the layer
        input_area: Total area of all loaded features
        output_area: Total area of the output features
    """
    loaded: int = 0
    kept: int = 0
    eliminated: int = 0
    merged: int = 0
    written: int = 0
    dropped_fids: List[int] = field(default_factory=list)
    omitted_fids: List[int] = field(default_factory=list)
    missing_fids: List[int] = field(default_factory=list)
    input_area: float = 0.0
    output_area: float = 0.0

    @property
    def area_ratio(self) -> Optional[float]:
        return area_ratio(self.output_area, self.input_area)


@dataclass
class EliminationResult:
    """Output features of a run together with its report."""
    features: List[OutputFeature]
    report: EliminationReport


def _measured_area(kernel: GeometryKernel, geometry) -> float:
    try:
        return kernel.area(geometry)
    except GeometryKernelError:
        return 0.0


def classify(arena: RecordArena, fids: Iterable[int]) -> Tuple[List[int], List[int], List[int]]:
    """Split the arena into records to eliminate and records to keep.

    Negative identifiers (including ``NO_FID``) are ignored and duplicates
    collapse to one request.

    Returns:
        Tuple of (to_eliminate, to_keep, missing) where the first two are
        arena indices in arena order and ``missing`` lists requested
        identifiers with no matching record.
    """
    requested: List[int] = []
    seen = set()
    for fid in fids:
        fid = int(fid)
        if fid < 0 or fid in seen:
            continue
        seen.add(fid)
        requested.append(fid)

    marked = set()
    missing = []
    for fid in requested:
        index = arena.index_of(fid)
        if index is None:
            missing.append(fid)
        else:
            marked.add(index)

    to_eliminate = [r.index for r in arena if r.index in marked]
    to_keep = [r.index for r in arena if r.index not in marked]
    return to_eliminate, to_keep, missing


def eliminate_records(
    features: Iterable[SourceFeature],
    fids: Iterable[int],
    policy: Union[MergePolicy, str] = MergePolicy.LARGEST_AREA,
    kernel: Optional[GeometryKernel] = None,
) -> EliminationResult:
    """Merge the features listed in ``fids`` into touching neighbours.

    Every selected feature is merged into one touching neighbour chosen by
    ``policy``. Targets may themselves be eliminated; each surviving feature
    receives the union of its own geometry and everything merged into it,
    transitively. Attributes of surviving features are passed through
    unchanged and eliminated features never appear in the output.

    Problems with individual features (no geometry, no touching neighbour,
    failed union) are reported as :class:`~sliverforge.core.errors.EliminationWarning`
    subclasses and the run carries on.

    Args:
        features: Features of the layer, in layer order
        fids: Identifiers of the features to eliminate
        policy: Merge policy (enum or string literal):
            - MergePolicy.LARGEST_AREA: Neighbour with the largest area (default)
            - MergePolicy.SMALLEST_AREA: Neighbour with the smallest area
            - MergePolicy.LONGEST_BOUNDARY: Neighbour sharing the longest boundary
        kernel: Geometry kernel (default: :class:`ShapelyKernel`)

    Returns:
        EliminationResult with the surviving features in layer order

    Examples:
        >>> features = [
        ...     SourceFeature(1, {'name': 'a'}, box(0, 0, 1, 1)),
        ...     SourceFeature(2, {'name': 'b'}, box(1, 0, 1.1, 1)),
        ...     SourceFeature(3, {'name': 'c'}, box(1.1, 0, 3, 1)),
        ... ]
        >>> result = eliminate_records(features, [2])
        >>> [f.fid for f in result.features]
        [1, 3]
        >>> result.features[1].merged_fids
        [2]
    """
    policy = coerce_enum(policy, MergePolicy)
    kernel = kernel or ShapelyKernel()

    with kernel.session():
        arena = RecordArena(features, kernel)
        index = SpatialIndex()
        try:
            return _run(arena, index, fids, policy)
        finally:
            index.close()
            arena.release()


def _run(
    arena: RecordArena,
    index: SpatialIndex,
    fids: Iterable[int],
    policy: MergePolicy,
) -> EliminationResult:
    to_eliminate, to_keep, missing = classify(arena, fids)
    if missing:
        warnings.warn(
            MissingFeatureWarning(
                f"{len(missing)} feature id(s) requested for elimination not found in layer",
                fids=missing,
            ),
            stacklevel=3,
        )

    index_records(arena, index)
    forest = MergeForest(arena, to_eliminate)
    dropped: List[int] = []

    for child in to_eliminate:
        record = arena[child]
        neighbors = discover_neighbors(record, arena, index)
        if not neighbors:
            dropped.append(record.fid)
            continue

        target = select_merge_target(
            neighbors,
            arena,
            policy,
            exclude=lambda candidate: forest.would_create_cycle(child, candidate),
        )
        if target is None:
            warnings.warn(
                NoNeighborWarning(
                    f"Feature {record.fid}: every neighbor already merges into it; feature is dropped",
                    fid=record.fid,
                ),
                stacklevel=3,
            )
            dropped.append(record.fid)
            continue
        forest.add_edge(child, target)

    orphans = [arena[i].fid for i in forest.unreachable(to_keep)]
    if orphans:
        warnings.warn(
            OrphanedMergeWarning(
                f"{len(orphans)} feature(s) merged into eliminated features that reach no "
                "surviving feature; they are dropped",
                fids=orphans,
            ),
            stacklevel=3,
        )
        dropped.extend(orphans)

    outputs: List[OutputFeature] = []
    omitted: List[int] = []
    lost: List[int] = []
    for keep in to_keep:
        output = composite_geometry(arena[keep], forest)
        if output is None:
            omitted.append(arena[keep].fid)
            # Features merged into an omitted survivor never reach the output.
            lost.extend(arena[i].fid for i in forest.all_merged_into(keep))
        else:
            outputs.append(output)

    report = EliminationReport(
        loaded=len(arena),
        kept=len(to_keep),
        eliminated=len(to_eliminate),
        merged=len(forest) - len(orphans) - len(lost),
        written=len(outputs),
        dropped_fids=dropped + lost,
        omitted_fids=omitted,
        missing_fids=missing,
        input_area=sum(record.area() for record in arena),
        output_area=total_area(
            (output.geometry for output in outputs),
            measure=lambda geometry: _measured_area(arena.kernel, geometry),
        ),
    )
    return EliminationResult(outputs, report)


__all__ = [
    'EliminationReport',
    'EliminationResult',
    'classify',
    'eliminate_records',
]
