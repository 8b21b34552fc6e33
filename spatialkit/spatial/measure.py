"""Planar area and distance measurement.

All measurements require a projected CRS; geographic inputs raise
UnprojectedGeometryError rather than returning numbers in square degrees.
Results are Quantities tagged with their unit.
"""

import logging
from collections.abc import Sequence

import numpy as np

from spatialkit.config import ToolkitConfig
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import Point, Polygon, ring_signed_area
from spatialkit.models.measurement import Quantity, Unit
from spatialkit.models.relation import DistanceMatrix
from spatialkit.spatial.parallel import map_rows
from spatialkit.spatial.predicates import geometries_intersect
from spatialkit.spatial.primitives import (
    point_segment_distances,
    points_segments_min_distance,
)
from spatialkit.spatial.utils import align_crs, require_projected, require_same_crs

logger = logging.getLogger(__name__)


def _area_value(geometry: Point | Polygon) -> float:
    if isinstance(geometry, Point):
        return 0.0
    shell, *holes = geometry.ring_arrays
    return abs(ring_signed_area(shell)) - sum(abs(ring_signed_area(h)) for h in holes)


def area(geometry: Point | Polygon) -> Quantity:
    """Area of a geometry in square metres (shell minus holes).

    Raises:
        UnprojectedGeometryError: If the geometry is in a geographic CRS
    """
    require_projected(geometry.crs, "Area")
    return Quantity(value=_area_value(geometry), unit=Unit.SQUARE_METRE)


def perimeter(geometry: Point | Polygon) -> Quantity:
    """Total length of all polygon rings in metres (0 for points)."""
    require_projected(geometry.crs, "Perimeter")
    if isinstance(geometry, Point):
        return Quantity(value=0.0, unit=Unit.METRE)
    total = 0.0
    for ring in geometry.ring_arrays:
        total += float(np.hypot(np.diff(ring[:, 0]), np.diff(ring[:, 1])).sum())
    return Quantity(value=total, unit=Unit.METRE)


def _distance_value(a: Point | Polygon, b: Point | Polygon) -> float:
    if isinstance(a, Point) and isinstance(b, Point):
        return float(np.hypot(a.x - b.x, a.y - b.y))

    if geometries_intersect(a, b):
        return 0.0

    if isinstance(a, Point):
        return float(point_segment_distances(a.x, a.y, b.edges()).min())
    if isinstance(b, Point):
        return float(point_segment_distances(b.x, b.y, a.edges()).min())

    # Closest points of two disjoint polygons include a vertex of one of them
    return min(
        points_segments_min_distance(a.vertices(), b.edges()),
        points_segments_min_distance(b.vertices(), a.edges()),
    )


def distance(a: Point | Polygon, b: Point | Polygon) -> Quantity:
    """Euclidean distance between the closest points of two geometries.

    Zero when the geometries intersect (including touching boundaries).

    Raises:
        CRSMismatchError: If the geometries are in different CRSs
        UnprojectedGeometryError: If the shared CRS is geographic
    """
    require_same_crs(a, b)
    require_projected(a.crs, "Distance")
    return Quantity(value=_distance_value(a, b), unit=Unit.METRE)


def _distance_rows(left: Sequence, right: Sequence) -> list[list[float]]:
    """Worker: distance from each left geometry to every right geometry."""
    return [[_distance_value(a, b) for b in right] for a in left]


def distance_matrix(
    left: FeatureCollection,
    right: FeatureCollection,
    config: ToolkitConfig | None = None,
) -> DistanceMatrix:
    """Pairwise distances (metres) between two planar collections.

    Raises:
        CRSMismatchError: If the collections' CRSs differ under the reject policy
        UnprojectedGeometryError: If the shared CRS is geographic
    """
    left, right = align_crs(left, right, config.crs_policy if config else None)
    require_projected(left.crs, "Distance matrix")

    logger.info(f"Computing {len(left)} x {len(right)} distance matrix")
    rows = map_rows(_distance_rows, left.geometries, right.geometries, config)
    values = np.array(rows, dtype=float).reshape(len(left), len(right))
    return DistanceMatrix(values, Unit.METRE)


def nearest(
    left: FeatureCollection,
    right: FeatureCollection,
    config: ToolkitConfig | None = None,
) -> list[tuple[int | None, Quantity | None]]:
    """For each feature of ``left``, the index of and distance to the closest ``right``."""
    return distance_matrix(left, right, config).nearest()


def add_area_column(
    collection: FeatureCollection,
    unit: Unit | str = Unit.ACRE,
    column: str = "area",
) -> FeatureCollection:
    """Return a new collection with an ``<column>_<unit>`` attribute appended.

    Raises:
        UnprojectedGeometryError: If the collection is in a geographic CRS
    """
    unit = Unit(unit)
    require_projected(collection.crs, "Area")
    values = [area(g).to(unit).value for g in collection.geometries]
    return collection.with_column(f"{column}_{unit.suffix}", values)


def total_area(collection: FeatureCollection, unit: Unit | str = Unit.SQUARE_METRE) -> Quantity:
    """Summed area of every feature (overlaps are counted once per feature)."""
    require_projected(collection.crs, "Area")
    value = sum(_area_value(g) for g in collection.geometries)
    return Quantity(value=value, unit=Unit.SQUARE_METRE).to(unit)
