"""Core types and utilities for sliverforge.

This module provides type definitions, enums, exceptions, the geometry kernel
interface and the spatial index used throughout the library.
"""

from .types import (
    NO_FID,
    MergePolicy,
    ErrorKind,
    coerce_enum,
)

from .errors import (
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

from .kernel import GeometryKernel, ShapelyKernel
from .spatial_utils import SpatialIndex

__all__ = [
    # Types and enums
    'NO_FID',
    'MergePolicy',
    'ErrorKind',
    'coerce_enum',

    # Exceptions
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

    # Kernel and indexing
    'GeometryKernel',
    'ShapelyKernel',
    'SpatialIndex',
]
