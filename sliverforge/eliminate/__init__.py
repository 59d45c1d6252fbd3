"""Sliver elimination engine.

Features marked for elimination are merged into one touching neighbour each.
The pieces are split by stage: records, neighbour discovery, target
selection, the merge forest and geometry compositing, tied together by
:func:`eliminate_records`.
"""

from .record import SourceFeature, FeatureRecord, RecordArena
from .neighbors import discover_neighbors, index_records, shared_boundary_length
from .selection import select_merge_target
from .forest import MergeForest
from .compositor import OutputFeature, composite_geometry
from .core import EliminationReport, EliminationResult, classify, eliminate_records

__all__ = [
    'SourceFeature',
    'FeatureRecord',
    'RecordArena',
    'discover_neighbors',
    'index_records',
    'shared_boundary_length',
    'select_merge_target',
    'MergeForest',
    'OutputFeature',
    'composite_geometry',
    'EliminationReport',
    'EliminationResult',
    'classify',
    'eliminate_records',
]
