"""Exception and warning classes for sliverforge.

Fatal problems (bad configuration, unsupported layers, failed writes) are
raised as exceptions derived from :class:`SliverforgeError`. Problems that
only affect a single feature are reported through :mod:`warnings` using the
:class:`EliminationWarning` categories, and the run carries on.
"""


class SliverforgeError(Exception):
    """Base class for all sliverforge errors."""
    pass


class ConfigurationError(SliverforgeError):
    """Raised when the elimination is configured inconsistently.

    Examples: the source layer is missing or ambiguous, or no selection
    criterion was given.
    """
    pass


class UnsupportedOperationError(SliverforgeError):
    """Raised when the layer or geometry kernel cannot support elimination.

    Examples: the layer has no geometry column, more than one geometry
    column, or the kernel lacks a required capability.
    """
    pass


class GeometryKernelError(SliverforgeError):
    """Raised when a geometry kernel primitive fails for a feature."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}")


class LayerWriteError(SliverforgeError):
    """Raised when the destination layer cannot be written."""
    pass


class EliminationWarning(UserWarning):
    """Base category for non-fatal elimination diagnostics."""
    pass


class FeatureWarning(EliminationWarning):
    """A single feature could not be processed and was skipped."""

    def __init__(self, message: str, fid: int = -1):
        self.fid = fid
        super().__init__(message)


class NoNeighborWarning(FeatureWarning):
    """A feature marked for elimination has no touching neighbour."""
    pass


class MissingFeatureWarning(EliminationWarning):
    """Identifiers requested for elimination are absent from the layer."""

    def __init__(self, message: str, fids=()):
        self.fids = tuple(fids)
        super().__init__(message)


class OrphanedMergeWarning(EliminationWarning):
    """Merge chains ended in eliminated features and never reached a survivor."""

    def __init__(self, message: str, fids=()):
        self.fids = tuple(fids)
        super().__init__(message)


__all__ = [
    'SliverforgeError',
    'ConfigurationError',
    'UnsupportedOperationError',
    'GeometryKernelError',
    'LayerWriteError',
    'EliminationWarning',
    'FeatureWarning',
    'NoNeighborWarning',
    'MissingFeatureWarning',
    'OrphanedMergeWarning',
]
