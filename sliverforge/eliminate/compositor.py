"""Geometry compositing for surviving features."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.errors import FeatureWarning, GeometryKernelError
from .forest import MergeForest
from .record import FeatureRecord


@dataclass
class OutputFeature:
    """A surviving feature ready to be written.

    Attributes:
        fid: Identifier of the surviving source feature
        attributes: The survivor's original attribute values
        geometry: Survivor geometry unioned with everything merged into it
        merged_fids: Identifiers of the features absorbed, in merge order
    """
    fid: int
    attributes: Dict[str, Any]
    geometry: Any
    merged_fids: List[int] = field(default_factory=list)


def composite_geometry(record: FeatureRecord, forest: MergeForest) -> Optional[OutputFeature]:
    """Build the output feature for a surviving record.

    With nothing merged into the record, its original geometry is used as
    is (no union, so no precision loss). Otherwise the record's geometry and
    every transitively merged geometry are unioned in one kernel call and
    the record's spatial reference is put back on the result.

    Returns:
        The output feature, or None if the record has no geometry or the
        union failed (a :class:`FeatureWarning` is emitted for the latter).
    """
    geometry = record.geometry()
    if geometry is None:
        return None

    arena = forest.arena
    merged = [arena[i] for i in forest.all_merged_into(record.index)]
    if not merged:
        return OutputFeature(record.fid, dict(record.attributes), geometry)

    parts = [geometry] + [m.geometry() for m in merged if m.geometry() is not None]
    kernel = arena.kernel
    try:
        unioned = kernel.union(parts)
    except GeometryKernelError as e:
        warnings.warn(
            FeatureWarning(
                f"Feature {record.fid}: union with {len(merged)} merged feature(s) failed ({e}); "
                "feature omitted",
                fid=record.fid,
            ),
            stacklevel=2,
        )
        return None

    return OutputFeature(
        record.fid,
        dict(record.attributes),
        kernel.copy_reference(unioned, geometry),
        [m.fid for m in merged],
    )


__all__ = [
    'OutputFeature',
    'composite_geometry',
]
