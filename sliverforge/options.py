"""Configuration for layer-level elimination runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from .core.errors import ConfigurationError
from .core.types import MergePolicy, coerce_enum

PathLike = Union[str, Path]


@dataclass
class EliminateOptions:
    """Settings for :func:`sliverforge.layer.eliminate_layer`.

    Exactly one selection criterion must be given: either an attribute
    filter (``where``) or an explicit identifier list (``fids``).

    Attributes:
        src_path: Source datasource (any OGR-readable path or connection string)
        dst_path: Destination datasource
        src_layer: Source layer name; required when the source has several layers
        dst_layer: Destination layer name (default: the source layer name)
        driver: OGR driver for the destination (default: inferred from ``dst_path``)
        where: Attribute filter selecting the features to eliminate; the
            pseudo-field ``OGR_GEOM_AREA`` may be used with any driver
        fids: Identifiers of the features to eliminate, as ints or strings
        policy: Merge policy (enum or string value)
    """

    src_path: PathLike
    dst_path: PathLike
    src_layer: Optional[str] = None
    dst_layer: Optional[str] = None
    driver: Optional[str] = None
    where: Optional[str] = None
    fids: Optional[Sequence[Union[int, str]]] = None
    policy: Union[MergePolicy, str] = MergePolicy.LARGEST_AREA

    def validate(self) -> None:
        """Raise ConfigurationError if the options cannot describe a run."""
        has_where = bool(self.where and self.where.strip())
        has_fids = self.fids is not None
        if not has_where and not has_fids:
            raise ConfigurationError("No selection criteria: give either a where filter or a list of fids")
        if has_where and has_fids:
            raise ConfigurationError("Give either a where filter or a list of fids, not both")
        try:
            self.policy = coerce_enum(self.policy, MergePolicy)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e


__all__ = ['EliminateOptions']
