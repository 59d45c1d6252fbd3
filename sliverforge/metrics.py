"""Area measurements for elimination results.

Elimination moves area between features but should not create or destroy
it. These helpers let callers (and the run report) compare the total area
of the input with the total area of the output.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Iterable, Optional

from shapely.geometry.base import BaseGeometry


def _safe_area(geometry: Optional[BaseGeometry]) -> float:
    if geometry is None:
        return 0.0
    area = getattr(geometry, "area", 0.0)
    if area is None or math.isnan(area):
        return 0.0
    return float(area)


def total_area(
    geometries: Iterable[Optional[Any]],
    measure: Optional[Callable[[Any], float]] = None,
) -> float:
    """Sum the areas of ``geometries``, counting missing geometries as 0.

    ``measure`` replaces the shapely area lookup for other geometry types.
    """
    measure = measure or _safe_area
    return sum(measure(geom) for geom in geometries if geom is not None)


def area_ratio(output_area: float, input_area: float) -> Optional[float]:
    """Return ``output_area / input_area``, or None if the input has no area."""
    if not input_area or input_area <= 0:
        return None
    return output_area / input_area


def is_area_conserved(
    input_area: float,
    output_area: float,
    rel_tol: float = 1e-9,
    abs_tol: float = 1e-9,
) -> bool:
    """True if the two totals agree within floating-point tolerance."""
    return math.isclose(input_area, output_area, rel_tol=rel_tol, abs_tol=abs_tol)


__all__ = [
    "total_area",
    "area_ratio",
    "is_area_conserved",
]
