"""Reprojection of geometries and collections between supported CRSs.

Projected -> projected transforms pass through geographic coordinates. Only
vertices are transformed, so edges stay straight in the target CRS (the same
behaviour as GeoPandas ``to_crs``).
"""

import logging

import numpy as np

from spatialkit.config import DEFAULT_CONFIG, ToolkitConfig
from spatialkit.errors import ProjectionAccuracyError
from spatialkit.models.crs import CRS, get_crs
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import Point, Polygon
from spatialkit.projection.albers import albers_projection

logger = logging.getLogger(__name__)


def _to_geographic(xs: np.ndarray, ys: np.ndarray, source: CRS) -> tuple[np.ndarray, np.ndarray]:
    if source.is_geographic:
        return xs, ys
    return albers_projection(source.albers).inverse(xs, ys)


def _from_geographic(
    lons: np.ndarray, lats: np.ndarray, target: CRS
) -> tuple[np.ndarray, np.ndarray]:
    if target.is_geographic:
        return lons, lats
    return albers_projection(target.albers).forward(lons, lats)


def transform_coordinates(
    xs, ys, source: CRS | int | str, target: CRS | int | str
) -> tuple[np.ndarray, np.ndarray]:
    """Transform coordinate arrays from ``source`` to ``target``.

    Raises:
        UnsupportedCRSError: If either CRS is not registered
    """
    source = get_crs(source)
    target = get_crs(target)
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if source == target:
        return xs, ys

    lons, lats = _to_geographic(xs, ys, source)
    return _from_geographic(lons, lats, target)


def check_round_trip(
    lons, lats, crs: CRS | int | str, config: ToolkitConfig | None = None
) -> float:
    """Largest geographic -> ``crs`` -> geographic error, in degrees.

    Raises:
        ProjectionAccuracyError: If the error exceeds
            ToolkitConfig.projection_tolerance_deg
    """
    crs = get_crs(crs)
    lons = np.asarray(lons, dtype=float)
    lats = np.asarray(lats, dtype=float)
    if crs.is_geographic or lons.size == 0:
        return 0.0

    xs, ys = _from_geographic(lons, lats, crs)
    back_lons, back_lats = _to_geographic(xs, ys, crs)
    error = float(max(np.max(np.abs(back_lons - lons)), np.max(np.abs(back_lats - lats))))

    tolerance = (config or DEFAULT_CONFIG).projection_tolerance_deg
    if error > tolerance:
        msg = f"{crs} round trip drifted {error:.3g} degrees (tolerance {tolerance:g})"
        raise ProjectionAccuracyError(msg)
    return error


def reproject(geometry: Point | Polygon, target_crs: CRS | int | str) -> Point | Polygon:
    """Return ``geometry`` expressed in ``target_crs``.

    Returns the input unchanged when it is already in the target CRS.

    Raises:
        UnsupportedCRSError: If the target CRS is not registered
    """
    target = get_crs(target_crs)
    if geometry.crs == target:
        return geometry

    if isinstance(geometry, Point):
        xs, ys = transform_coordinates([geometry.x], [geometry.y], geometry.crs, target)
        return Point(float(xs[0]), float(ys[0]), target)

    rings = []
    for ring in geometry.ring_arrays:
        xs, ys = transform_coordinates(ring[:, 0], ring[:, 1], geometry.crs, target)
        rings.append(tuple(zip(xs.tolist(), ys.tolist())))
    return Polygon(tuple(rings), target)


def reproject_collection(
    collection: FeatureCollection, target_crs: CRS | int | str
) -> FeatureCollection:
    """Reproject every feature of a collection, keeping attributes and order.

    Raises:
        ProjectionAccuracyError: If projecting geographic input does not
            round-trip within ToolkitConfig.projection_tolerance_deg
    """
    target = get_crs(target_crs)
    if collection.crs == target:
        return collection

    logger.info(f"Reprojecting {len(collection)} features from {collection.crs} to {target}")
    if collection.crs.is_geographic and collection.bounds is not None:
        # Corners and centre of the layer extent
        minx, miny, maxx, maxy = collection.bounds
        error = check_round_trip(
            [minx, maxx, minx, maxx, (minx + maxx) / 2],
            [miny, miny, maxy, maxy, (miny + maxy) / 2],
            target,
        )
        logger.debug(f"{target} round trip error over layer extent: {error:.3g} degrees")
    return collection.map_geometries(lambda g: reproject(g, target), crs=target)
