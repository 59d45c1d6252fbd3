"""Sliverforge - Sliver polygon elimination library.

This library removes small or otherwise unwanted polygons from a layer by
merging each of them into a touching neighbour, using Shapely for geometry
and pyogrio/GeoPandas for reading and writing layers.
"""


# Elimination engine
from .eliminate import (
    SourceFeature,
    OutputFeature,
    EliminationReport,
    EliminationResult,
    eliminate_records,
)

# Layer-level functions
from .layer import (
    eliminate_frame,
    eliminate_layer,
    run_elimination,
    parse_fid_list,
    select_fids_by_where,
    rewrite_area_pseudo_field,
)
from .options import EliminateOptions

# Metrics
from .metrics import total_area, is_area_conserved

# Core types (enums)
from .core import (
    NO_FID,
    MergePolicy,
    ErrorKind,
)

# Kernel
from .core import GeometryKernel, ShapelyKernel

# Core exceptions and warnings
from .core import (
    SliverforgeError,
    ConfigurationError,
    UnsupportedOperationError,
    GeometryKernelError,
    LayerWriteError,
    EliminationWarning,
    FeatureWarning,
    NoNeighborWarning,
    MissingFeatureWarning,
    OrphanedMergeWarning,
)

__all__ = [

    # Elimination
    'SourceFeature',
    'OutputFeature',
    'EliminationReport',
    'EliminationResult',
    'eliminate_records',

    # Layers
    'eliminate_frame',
    'eliminate_layer',
    'run_elimination',
    'parse_fid_list',
    'select_fids_by_where',
    'rewrite_area_pseudo_field',
    'EliminateOptions',

    # Metrics
    'total_area',
    'is_area_conserved',

    # Core types (enums)
    'NO_FID',
    'MergePolicy',
    'ErrorKind',

    # Kernel
    'GeometryKernel',
    'ShapelyKernel',

    # Core exceptions
    'SliverforgeError',
    'ConfigurationError',
    'UnsupportedOperationError',
    'GeometryKernelError',
    'LayerWriteError',

    # Warnings
    'EliminationWarning',
    'FeatureWarning',
    'NoNeighborWarning',
    'MissingFeatureWarning',
    'OrphanedMergeWarning',
]
