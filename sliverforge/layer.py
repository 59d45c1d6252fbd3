"""Feature-store binding: GeoDataFrames and OGR datasources.

:func:`eliminate_frame` runs the engine over an in-memory GeoDataFrame whose
index holds the feature identifiers. :func:`eliminate_layer` reads a layer
with pyogrio, resolves the elimination selection (attribute filter or
identifier list), and writes the surviving features to a new layer.
:func:`run_elimination` wraps it and reports the outcome as an
:class:`~sliverforge.core.types.ErrorKind`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Tuple, Union

import geopandas as gpd
import pandas as pd
import pyogrio
from pyogrio.errors import DataLayerError, DataSourceError, FeatureError, FieldError, GeometryError

from .core.errors import (
    ConfigurationError,
    LayerWriteError,
    SliverforgeError,
    UnsupportedOperationError,
)
from .core.kernel import GeometryKernel
from .core.types import NO_FID, ErrorKind, MergePolicy
from .eliminate import EliminationReport, SourceFeature, eliminate_records
from .options import EliminateOptions

logger = logging.getLogger(__name__)

AREA_PSEUDO_FIELD = "OGR_GEOM_AREA"

# Drivers whose attribute filters are evaluated by the backend's own SQL
# engine, which does not know the OGR SQL area pseudo-field.
_NATIVE_AREA_FUNCTIONS = {
    "GPKG": 'ST_Area("{column}")',
    "SQLite": 'ST_Area("{column}")',
    "PostgreSQL": 'ST_Area("{column}")',
}
_DEFAULT_GEOMETRY_COLUMNS = {
    "GPKG": "geom",
    "SQLite": "GEOMETRY",
    "PostgreSQL": "wkb_geometry",
}
_POLYGONAL_TYPES = {"Polygon", "MultiPolygon", "Unknown"}
# Drivers whose layers may carry more than one geometry field. pyogrio only
# exposes the first one.
_MULTI_GEOMETRY_DRIVERS = {"PostgreSQL", "SQLite", "CSV", "GML", "MSSQLSpatial", "Memory"}

_IO_ERRORS = (DataSourceError, DataLayerError, FeatureError, FieldError, GeometryError, OSError)


# ---------------------------------------------------------------------------
# Selection front-ends
# ---------------------------------------------------------------------------

def parse_fid(token: Union[int, str]) -> int:
    """Parse a single feature identifier; invalid or negative gives ``NO_FID``."""
    try:
        fid = int(str(token).strip())
    except (TypeError, ValueError):
        return NO_FID
    return fid if fid >= 0 else NO_FID


def parse_fid_list(tokens: Iterable[Union[int, str]]) -> List[int]:
    """Parse identifier tokens into a deduplicated list of FIDs.

    Non-numeric and negative tokens are dropped silently; the order of first
    appearance is kept.

    Examples:
        >>> parse_fid_list(["3", "1", "x", "-4", "3"])
        [3, 1]
    """
    fids: List[int] = []
    seen = set()
    for token in tokens:
        fid = parse_fid(token)
        if fid == NO_FID or fid in seen:
            continue
        seen.add(fid)
        fids.append(fid)
    return fids


def rewrite_area_pseudo_field(where: str, driver: Optional[str], geometry_column: Optional[str]) -> str:
    """Rewrite ``OGR_GEOM_AREA`` into the backend's native area function.

    OGR SQL understands the pseudo-field directly; GeoPackage, SQLite and
    PostgreSQL evaluate filters with their own SQL engine and need
    ``ST_Area(<geometry column>)`` instead. Filters for other drivers are
    returned unchanged.

    Examples:
        >>> rewrite_area_pseudo_field("OGR_GEOM_AREA < 0.5", "GPKG", "geom")
        'ST_Area("geom") < 0.5'
    """
    template = _NATIVE_AREA_FUNCTIONS.get(driver or "")
    if template is None:
        return where
    column = geometry_column or _DEFAULT_GEOMETRY_COLUMNS[driver]
    replacement = template.format(column=column)
    return re.sub(rf"\b{AREA_PSEUDO_FIELD}\b", lambda _: replacement, where, flags=re.IGNORECASE)


def select_fids_by_where(path, layer: Optional[str], where: str) -> List[int]:
    """Evaluate an attribute filter and return the identifiers it matches."""
    info = pyogrio.read_info(path, layer=layer)
    expression = rewrite_area_pseudo_field(where, info.get("driver"), info.get("geometry_name"))
    if expression != where:
        logger.debug("rewrote filter %r as %r for driver %s", where, expression, info.get("driver"))

    # OGR SQL computes the pseudo-field from the fetched geometry; a filter
    # on it matches nothing when the geometry field is skipped.
    uses_area = re.search(rf"\b{AREA_PSEUDO_FIELD}\b", expression, flags=re.IGNORECASE) is not None
    matches = pyogrio.read_dataframe(
        path,
        layer=layer,
        where=expression,
        columns=[],
        read_geometry=uses_area,
        fid_as_index=True,
    )
    return [int(fid) for fid in matches.index]


# ---------------------------------------------------------------------------
# Layer validation and conversion
# ---------------------------------------------------------------------------

def resolve_layer(path, layer: Optional[str]) -> str:
    """Return the source layer name, checking that it exists.

    Raises:
        ConfigurationError: If ``layer`` is not found, or ``layer`` is None
            and the datasource does not hold exactly one layer
    """
    names = [str(name) for name in pyogrio.list_layers(path)[:, 0]]
    if layer is None:
        if len(names) != 1:
            raise ConfigurationError(
                f"Source layer must be specified ({len(names)} layers in {path})."
            )
        return names[0]
    if layer not in names:
        raise ConfigurationError(f"Source layer '{layer}' not found.")
    return layer


def _base_geometry_type(geometry_type: Optional[str]) -> Optional[str]:
    if geometry_type is None:
        return None
    return re.sub(r"\s*(Z|M|ZM|25D)$", "", str(geometry_type)).replace("3D ", "")


def check_layer_info(info: dict) -> None:
    """Reject layers the elimination cannot process.

    pyogrio reports a single geometry field per layer, so several geometry
    columns cannot be detected here. For drivers that support them a warning
    is logged and only the first geometry field is processed.

    Raises:
        UnsupportedOperationError: If the layer has no geometry column or a
            non-polygonal geometry type
    """
    geometry_type = _base_geometry_type(info.get("geometry_type"))
    if geometry_type is None:
        raise UnsupportedOperationError("Geometry column not found.")
    if geometry_type not in _POLYGONAL_TYPES:
        raise UnsupportedOperationError(f"Unsupported geometry type '{geometry_type}'.")
    driver = info.get("driver")
    if driver in _MULTI_GEOMETRY_DRIVERS:
        logger.warning(
            "%s layers may hold several geometry columns; only '%s' is processed",
            driver,
            info.get("geometry_name") or "the first",
        )


def geometry_columns(gdf: pd.DataFrame) -> List[str]:
    """Names of the columns holding geometries."""
    return [name for name, dtype in gdf.dtypes.items() if getattr(dtype, "name", None) == "geometry"]


def check_frame(gdf: gpd.GeoDataFrame) -> str:
    """Validate a frame for elimination and return its geometry column name.

    Raises:
        UnsupportedOperationError: No geometry column, several geometry
            columns, or non-polygonal geometries
        ConfigurationError: The index does not hold unique integer ids
    """
    columns = geometry_columns(gdf)
    if not columns:
        raise UnsupportedOperationError("Geometry column not found.")
    if len(columns) > 1:
        raise UnsupportedOperationError(
            f"Multiple geometry columns not supported ({', '.join(columns)})."
        )
    if len(gdf) and not pd.api.types.is_integer_dtype(gdf.index.dtype):
        raise ConfigurationError("Frame index must hold integer feature ids.")
    if not gdf.index.is_unique:
        raise ConfigurationError("Frame index must hold unique feature ids.")

    geometry = gdf[columns[0]]
    kinds = set(geometry[geometry.notna()].geom_type) - {"Polygon", "MultiPolygon"}
    if kinds:
        raise UnsupportedOperationError(
            f"Unsupported geometry type(s): {', '.join(sorted(kinds))}."
        )
    return columns[0]


def frame_to_features(gdf: gpd.GeoDataFrame, geometry_column: str) -> List[SourceFeature]:
    """Turn frame rows into source features keyed by the frame index."""
    attributes = gdf.drop(columns=[geometry_column]).to_dict("records")
    return [
        SourceFeature(int(fid), attrs, geom)
        for fid, attrs, geom in zip(gdf.index, attributes, gdf[geometry_column])
    ]


def eliminate_frame(
    gdf: gpd.GeoDataFrame,
    fids: Iterable[int],
    policy: Union[MergePolicy, str] = MergePolicy.LARGEST_AREA,
    kernel: Optional[GeometryKernel] = None,
) -> Tuple[gpd.GeoDataFrame, EliminationReport]:
    """Eliminate the rows whose index is in ``fids``.

    The returned frame holds the surviving rows, in their original order,
    with their original attribute values and dtypes, the composited
    geometries and the source CRS.

    Args:
        gdf: Polygon layer with exactly one geometry column; the index is
            the feature identifier
        fids: Identifiers of the rows to eliminate
        policy: Merge policy
        kernel: Geometry kernel (default: shapely)

    Returns:
        Tuple of (surviving features, run report)
    """
    geometry_column = check_frame(gdf)
    result = eliminate_records(frame_to_features(gdf, geometry_column), fids, policy=policy, kernel=kernel)

    kept = [feature.fid for feature in result.features]
    output = gdf.loc[kept].copy()
    output[geometry_column] = gpd.GeoSeries(
        [feature.geometry for feature in result.features],
        index=output.index,
        crs=gdf.crs,
    )
    output = output.set_geometry(geometry_column)
    return output, result.report


# ---------------------------------------------------------------------------
# Datasource level
# ---------------------------------------------------------------------------

def read_layer(path, layer: str) -> gpd.GeoDataFrame:
    """Read a whole layer, indexed by FID."""
    return pyogrio.read_dataframe(path, layer=layer, fid_as_index=True)


def write_layer(gdf: gpd.GeoDataFrame, path, layer: str, driver: Optional[str] = None) -> None:
    """Create ``layer`` in ``path`` and write ``gdf`` into it.

    Fields are created from the frame columns before any feature is written.

    Raises:
        LayerWriteError: If the driver rejects the layer or a feature
    """
    try:
        pyogrio.write_dataframe(gdf.reset_index(drop=True), path, layer=layer, driver=driver)
    except _IO_ERRORS as e:
        raise LayerWriteError(f"Cannot write layer '{layer}' to {path}: {e}") from e


def eliminate_layer(options: EliminateOptions, kernel: Optional[GeometryKernel] = None) -> EliminationReport:
    """Run a complete elimination from one datasource layer to another.

    Raises:
        ConfigurationError: Bad options, or missing/ambiguous source layer
        UnsupportedOperationError: Layer without (polygon) geometry
        LayerWriteError: Destination could not be written
    """
    options.validate()
    src_layer = resolve_layer(options.src_path, options.src_layer)
    info = pyogrio.read_info(options.src_path, layer=src_layer)
    check_layer_info(info)

    logger.info("processing layer %s (%d features)", src_layer, info.get("features", -1))
    for name, dtype in zip(info.get("fields", []), info.get("dtypes", [])):
        logger.debug("field '%s': %s", name, dtype)

    if options.where:
        fids = select_fids_by_where(options.src_path, src_layer, options.where)
        logger.info("filter %r selected %d features", options.where, len(fids))
    else:
        fids = parse_fid_list(options.fids)

    source = read_layer(options.src_path, src_layer)
    output, report = eliminate_frame(source, fids, policy=options.policy, kernel=kernel)

    dst_layer = options.dst_layer or src_layer
    write_layer(output, options.dst_path, dst_layer, driver=options.driver)
    logger.info(
        "wrote %d features to %s (%d eliminated, %d merged, %d dropped)",
        report.written,
        dst_layer,
        report.eliminated,
        report.merged,
        len(report.dropped_fids),
    )
    return report


def run_elimination(options: EliminateOptions, kernel: Optional[GeometryKernel] = None) -> ErrorKind:
    """Run :func:`eliminate_layer` and report the outcome as an ErrorKind.

    Fatal errors are logged; per-feature problems only surface as warnings
    and still count as success.
    """
    try:
        eliminate_layer(options, kernel=kernel)
    except UnsupportedOperationError as e:
        logger.error("%s", e)
        return ErrorKind.UNSUPPORTED_OPERATION
    except (SliverforgeError, *_IO_ERRORS) as e:
        logger.error("%s", e)
        return ErrorKind.FAILURE
    return ErrorKind.NONE


__all__ = [
    'AREA_PSEUDO_FIELD',
    'parse_fid',
    'parse_fid_list',
    'rewrite_area_pseudo_field',
    'select_fids_by_where',
    'resolve_layer',
    'check_layer_info',
    'geometry_columns',
    'check_frame',
    'frame_to_features',
    'eliminate_frame',
    'read_layer',
    'write_layer',
    'eliminate_layer',
    'run_elimination',
]
