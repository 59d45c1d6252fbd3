"""Feature records: one source feature plus its lazily derived geometry state."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from ..core.errors import FeatureWarning, GeometryKernelError
from ..core.kernel import GeometryKernel
from ..core.types import NO_FID

_UNSET = object()


@dataclass(frozen=True)
class SourceFeature:
    """A feature as supplied by the feature store.

    Attributes:
        fid: Stable feature identifier (``NO_FID`` if the store has none)
        attributes: Attribute values keyed by field name
        geometry: Stored geometry in any form the kernel can convert
            (shapely geometry, WKB or WKT), or None
    """
    fid: int
    attributes: Dict[str, Any] = field(default_factory=dict)
    geometry: Any = None


class FeatureRecord:
    """Working state for one feature during an elimination run.

    The record keeps its own copy of the attributes and the stored geometry.
    The kernel geometry, prepared geometry and area are computed on first
    use and cached for the lifetime of the record; a failed computation is
    cached as well so the warning is only emitted once.

    ``neighbors`` holds ``(arena index, shared boundary length)`` pairs found
    by neighbour discovery and ``children`` the arena indices of records
    that chose this record as their merge target.
    """

    def __init__(self, feature: SourceFeature, kernel: GeometryKernel, index: int):
        self.fid = feature.fid
        self.attributes = dict(feature.attributes)
        self.source_geometry = feature.geometry
        self.index = index
        self.neighbors: List[Tuple[int, float]] = []
        self.children: List[int] = []
        self._kernel = kernel
        self._geometry = _UNSET
        self._prepared = _UNSET
        self._area: Optional[float] = None

    def __repr__(self) -> str:
        return f"FeatureRecord(fid={self.fid}, index={self.index})"

    def geometry(self):
        """Return the kernel geometry, or None if it is unavailable."""
        if self._geometry is _UNSET:
            try:
                self._geometry = self._kernel.to_native(self.source_geometry)
            except GeometryKernelError as e:
                self._geometry = None
                warnings.warn(
                    FeatureWarning(f"Feature {self.fid}: geometry unavailable ({e})", fid=self.fid),
                    stacklevel=2,
                )
        return self._geometry

    def prepared_geometry(self):
        """Return the prepared geometry, building it on first call."""
        if self._prepared is _UNSET:
            geometry = self.geometry()
            if geometry is None:
                self._prepared = None
            else:
                try:
                    self._prepared = self._kernel.prepare(geometry)
                except GeometryKernelError as e:
                    self._prepared = None
                    warnings.warn(
                        FeatureWarning(f"Feature {self.fid}: cannot prepare geometry ({e})", fid=self.fid),
                        stacklevel=2,
                    )
        return self._prepared

    def area(self) -> float:
        """Planar area, 0.0 if it cannot be computed."""
        if self._area is None:
            geometry = self.geometry()
            area = 0.0
            if geometry is not None:
                try:
                    area = self._kernel.area(geometry)
                except GeometryKernelError as e:
                    warnings.warn(
                        FeatureWarning(f"Feature {self.fid}: area calculation failed ({e})", fid=self.fid),
                        stacklevel=2,
                    )
            self._area = area
        return self._area

    def has_geometry(self) -> bool:
        return self.geometry() is not None

    def release(self) -> None:
        """Drop cached kernel handles and merge-graph links."""
        self._prepared = _UNSET
        self._geometry = _UNSET
        self._area = None
        self.neighbors = []
        self.children = []


class RecordArena:
    """Owning collection of the records of one run.

    Records refer to each other by their position in the arena. The arena
    is filled once and never resized while the run is in progress.
    """

    def __init__(self, features: Iterable[SourceFeature], kernel: GeometryKernel):
        self.kernel = kernel
        self._records: List[FeatureRecord] = []
        self._by_fid: Dict[int, int] = {}
        for feature in features:
            record = FeatureRecord(feature, kernel, len(self._records))
            if record.fid != NO_FID and record.fid not in self._by_fid:
                self._by_fid[record.fid] = record.index
            self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FeatureRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> FeatureRecord:
        return self._records[index]

    def index_of(self, fid: int) -> Optional[int]:
        """Arena index of the record with ``fid``, or None."""
        return self._by_fid.get(fid)

    def release(self) -> None:
        """Release every record's cached state and empty the arena."""
        for record in self._records:
            record.release()
        self._records = []
        self._by_fid = {}


__all__ = [
    'SourceFeature',
    'FeatureRecord',
    'RecordArena',
]
