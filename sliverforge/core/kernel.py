"""Geometry kernel capability interface.

The elimination engine only needs a handful of primitives from the geometry
library: conversion of stored geometries, area, length, a prepared
``touches`` predicate, intersection and union. They are collected behind
:class:`GeometryKernel` so tests (and alternative backends) can substitute
their own implementation. :class:`ShapelyKernel` is the default and is backed
by Shapely 2.x / GEOS.

Kernel methods raise :class:`~sliverforge.core.errors.GeometryKernelError`
instead of returning sentinel values.
"""

from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Any, Iterator, Sequence, Tuple

import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.prepared import prep

from .errors import GeometryKernelError, UnsupportedOperationError

Bounds = Tuple[float, float, float, float]

# Oldest GEOS providing prepared touches and robust unary union.
MIN_GEOS_VERSION = (3, 8, 0)


class GeometryKernel:
    """Capability set required by the elimination engine.

    Subclasses must implement every method. Geometry handles are opaque to
    the engine; only the kernel inspects them.
    """

    @contextmanager
    def session(self) -> Iterator["GeometryKernel"]:
        """Acquire the kernel context for the duration of one run."""
        yield self

    def to_native(self, source: Any) -> Any:
        raise NotImplementedError

    def prepare(self, geometry: Any) -> Any:
        raise NotImplementedError

    def area(self, geometry: Any) -> float:
        raise NotImplementedError

    def length(self, geometry: Any) -> float:
        raise NotImplementedError

    def bounds(self, geometry: Any) -> Bounds:
        raise NotImplementedError

    def touches(self, prepared: Any, other: Any) -> bool:
        raise NotImplementedError

    def intersection(self, a: Any, b: Any) -> Any:
        raise NotImplementedError

    def union(self, geometries: Sequence[Any]) -> Any:
        raise NotImplementedError

    def copy_reference(self, target: Any, source: Any) -> Any:
        raise NotImplementedError

    def geometry_type(self, geometry: Any) -> str:
        raise NotImplementedError


class ShapelyKernel(GeometryKernel):
    """Geometry kernel backed by Shapely.

    Accepts shapely geometries, WKB bytes or WKT strings as stored source
    geometries.

    Examples:
        >>> kernel = ShapelyKernel()
        >>> square = kernel.to_native(box(0, 0, 1, 1).wkb)
        >>> kernel.area(square)
        1.0
    """

    @contextmanager
    def session(self) -> Iterator["ShapelyKernel"]:
        self.check_available()
        yield self

    @staticmethod
    def check_available() -> None:
        """Raise UnsupportedOperationError if the linked GEOS is too old."""
        version = tuple(shapely.geos_version)
        if version < MIN_GEOS_VERSION:
            raise UnsupportedOperationError(
                f"GEOS {'.'.join(map(str, MIN_GEOS_VERSION))} or newer is required, "
                f"found {'.'.join(map(str, version))}"
            )

    def to_native(self, source: Any) -> BaseGeometry:
        if source is None:
            raise GeometryKernelError("to_native", "feature has no geometry")
        try:
            if isinstance(source, BaseGeometry):
                geometry = source
            elif isinstance(source, (bytes, bytearray, memoryview)):
                geometry = shapely.from_wkb(bytes(source))
            elif isinstance(source, str):
                geometry = shapely.from_wkt(source)
            else:
                raise TypeError(f"unsupported geometry source {type(source).__name__}")
        except (TypeError, GEOSException) as e:
            raise GeometryKernelError("to_native", str(e)) from e

        if geometry is None or geometry.is_empty:
            raise GeometryKernelError("to_native", "feature geometry is empty")
        return geometry

    def prepare(self, geometry: BaseGeometry):
        try:
            return prep(geometry)
        except GEOSException as e:
            raise GeometryKernelError("prepare", str(e)) from e

    def area(self, geometry: BaseGeometry) -> float:
        return self._measure("area", shapely.area, geometry)

    def length(self, geometry: BaseGeometry) -> float:
        return self._measure("length", shapely.length, geometry)

    def bounds(self, geometry: BaseGeometry) -> Bounds:
        minx, miny, maxx, maxy = geometry.bounds
        return (minx, miny, maxx, maxy)

    def touches(self, prepared, other: BaseGeometry) -> bool:
        try:
            return bool(prepared.touches(other))
        except GEOSException as e:
            raise GeometryKernelError("touches", str(e)) from e

    def intersection(self, a: BaseGeometry, b: BaseGeometry) -> BaseGeometry:
        try:
            return shapely.intersection(a, b)
        except GEOSException as e:
            raise GeometryKernelError("intersection", str(e)) from e

    def union(self, geometries: Sequence[BaseGeometry]) -> BaseGeometry:
        collection = GeometryCollection(list(geometries))
        try:
            result = unary_union(collection)
        except GEOSException as e:
            raise GeometryKernelError("union", str(e)) from e
        if result is None or result.is_empty:
            raise GeometryKernelError("union", "union produced an empty geometry")
        return result

    def copy_reference(self, target: BaseGeometry, source: BaseGeometry) -> BaseGeometry:
        return shapely.set_srid(target, shapely.get_srid(source))

    def geometry_type(self, geometry: BaseGeometry) -> str:
        return geometry.geom_type

    @staticmethod
    def _measure(operation: str, func, geometry: BaseGeometry) -> float:
        try:
            value = float(func(geometry))
        except (TypeError, GEOSException) as e:
            raise GeometryKernelError(operation, str(e)) from e
        if math.isnan(value):
            raise GeometryKernelError(operation, "result is not a number")
        return value


__all__ = [
    'GeometryKernel',
    'ShapelyKernel',
    'MIN_GEOS_VERSION',
]
