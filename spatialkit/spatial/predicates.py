"""Spatial predicate evaluation between geometries and collections.

Boundary policy is inclusive throughout:
- ``intersects`` is true when two geometries share at least one point,
  so boundaries that only touch count as intersecting
- ``within`` is true when every point of the first geometry lies in the
  interior or on the boundary of the second

With this policy ``within(a, b)`` always implies ``intersects(a, b)``.

Available operations:
- intersects: Sparse relation of intersecting pairs between two collections
- within: Sparse relation of contained pairs between two collections
- geometry_intersects / geometry_within: Scalar forms for two geometries
"""

import logging
from collections.abc import Sequence

import numpy as np

from spatialkit.config import ToolkitConfig
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import Point, Polygon
from spatialkit.models.relation import SpatialRelation
from spatialkit.spatial.parallel import map_rows
from spatialkit.spatial.primitives import (
    Location,
    bounds_overlap,
    geometry_tolerance,
    interior_point,
    locate_point,
    locate_points,
    segments_cross_properly,
    segments_touch_or_cross,
    split_midpoints,
    tolerance,
)
from spatialkit.spatial.utils import align_crs, require_same_crs

logger = logging.getLogger(__name__)


def geometries_intersect(a: Point | Polygon, b: Point | Polygon, eps: float | None = None) -> bool:
    """Whether two geometries in the same CRS share at least one point."""
    if eps is None:
        eps = geometry_tolerance(a, b)
    if not bounds_overlap(a.bounds, b.bounds, eps):
        return False

    if isinstance(a, Point) and isinstance(b, Point):
        return bool(np.hypot(a.x - b.x, a.y - b.y) <= eps)
    if isinstance(a, Point):
        return locate_point(a.x, a.y, b, eps) != Location.EXTERIOR
    if isinstance(b, Point):
        return locate_point(b.x, b.y, a, eps) != Location.EXTERIOR

    if segments_touch_or_cross(a.edges(), b.edges(), eps):
        return True

    # No boundary contact: either one polygon is nested in the other or they are disjoint
    ax, ay = a.shell[0]
    if locate_point(ax, ay, b, eps) != Location.EXTERIOR:
        return True
    bx, by = b.shell[0]
    return locate_point(bx, by, a, eps) != Location.EXTERIOR


def _box_contains(outer: tuple, inner: tuple, eps: float) -> bool:
    return (
        inner[0] >= outer[0] - eps
        and inner[1] >= outer[1] - eps
        and inner[2] <= outer[2] + eps
        and inner[3] <= outer[3] + eps
    )


def geometry_within_unchecked(
    a: Point | Polygon, b: Point | Polygon, eps: float | None = None
) -> bool:
    """Whether ``a`` lies inside or on the boundary of ``b`` (same CRS assumed)."""
    if eps is None:
        eps = geometry_tolerance(a, b)
    if not _box_contains(b.bounds, a.bounds, eps):
        return False

    if isinstance(b, Point):
        # A polygon always has positive area, so only a coincident point fits
        return isinstance(a, Point) and bool(np.hypot(a.x - b.x, a.y - b.y) <= eps)
    if isinstance(a, Point):
        return locate_point(a.x, a.y, b, eps) != Location.EXTERIOR

    a_edges = a.edges()
    b_edges = b.edges()
    if segments_cross_properly(a_edges, b_edges, eps):
        return False

    # Cut each boundary at the other so every piece sits wholly on one side of it
    a_samples = np.vstack([a.vertices(), split_midpoints(a_edges, b_edges, eps)])
    a_locations = locate_points(a_samples, b, eps)
    if np.any(a_locations == Location.EXTERIOR):
        return False

    # Any ring of b, holes included, reaching into a's interior leaves part of a uncovered
    b_samples = np.vstack([b.vertices(), split_midpoints(b_edges, a_edges, eps)])
    if np.any(locate_points(b_samples, a, eps) == Location.INTERIOR):
        return False

    if np.all(a_locations == Location.BOUNDARY):
        # a's boundary runs along b's, so a either fills part of b or a hole of it
        x, y = interior_point(a, eps)
        return locate_point(x, y, b, eps) != Location.EXTERIOR

    return True


def geometry_intersects(a: Point | Polygon, b: Point | Polygon) -> bool:
    """Whether two geometries share at least one point (boundaries inclusive).

    Raises:
        CRSMismatchError: If the geometries are in different CRSs
    """
    require_same_crs(a, b)
    return geometries_intersect(a, b)


def geometry_within(a: Point | Polygon, b: Point | Polygon) -> bool:
    """Whether ``a`` lies in the interior or on the boundary of ``b``.

    Raises:
        CRSMismatchError: If the geometries are in different CRSs
    """
    require_same_crs(a, b)
    return geometry_within_unchecked(a, b)


def _bounds_array(geometries: Sequence[Point | Polygon]) -> np.ndarray:
    if not geometries:
        return np.empty((0, 4))
    return np.array([g.bounds for g in geometries], dtype=float)


def _candidates(geometry: Point | Polygon, right_bounds: np.ndarray, eps: float) -> np.ndarray:
    """Indices whose bounding boxes overlap the geometry's box."""
    minx, miny, maxx, maxy = geometry.bounds
    mask = ~(
        (right_bounds[:, 2] < minx - eps)
        | (right_bounds[:, 0] > maxx + eps)
        | (right_bounds[:, 3] < miny - eps)
        | (right_bounds[:, 1] > maxy + eps)
    )
    return np.flatnonzero(mask)


def _intersects_rows(left: Sequence, right: Sequence) -> list[list[int]]:
    """Worker: for each left geometry, indices of intersecting right geometries."""
    right_bounds = _bounds_array(right)
    rows = []
    for a in left:
        eps = max(geometry_tolerance(a), tolerance(right_bounds))
        rows.append(
            [int(j) for j in _candidates(a, right_bounds, eps) if geometries_intersect(a, right[j])]
        )
    return rows


def _within_rows(left: Sequence, right: Sequence) -> list[list[int]]:
    """Worker: for each left geometry, indices of right geometries containing it."""
    right_bounds = _bounds_array(right)
    rows = []
    for a in left:
        eps = max(geometry_tolerance(a), tolerance(right_bounds))
        rows.append(
            [
                int(j)
                for j in _candidates(a, right_bounds, eps)
                if geometry_within_unchecked(a, right[j])
            ]
        )
    return rows


def _relate(
    predicate: str,
    worker,
    left: FeatureCollection,
    right: FeatureCollection,
    config: ToolkitConfig | None,
) -> SpatialRelation:
    left, right = align_crs(left, right, config.crs_policy if config else None)

    logger.info(f"Evaluating {predicate} for {len(left)} x {len(right)} features")
    rows = map_rows(worker, left.geometries, right.geometries, config)

    relation = SpatialRelation.from_rows(
        predicate, (len(left), len(right)), enumerate(rows)
    )
    logger.info(f"{predicate}: {relation.count()} related pair(s)")
    return relation


def intersects(
    left: FeatureCollection,
    right: FeatureCollection,
    config: ToolkitConfig | None = None,
) -> SpatialRelation:
    """For each feature i of ``left``, the ``right`` features sharing a point with it.

    Args:
        left: Source collection (rows)
        right: Related collection (columns)
        config: Toolkit configuration (CRS policy, parallelism)

    Returns:
        SpatialRelation with 0-based indices

    Raises:
        CRSMismatchError: If the CRSs differ under the reject policy
    """
    return _relate("intersects", _intersects_rows, left, right, config)


def within(
    left: FeatureCollection,
    right: FeatureCollection,
    config: ToolkitConfig | None = None,
) -> SpatialRelation:
    """For each feature i of ``left``, the ``right`` features that contain it.

    Containment is inclusive of the boundary: a campground exactly on a
    buffer's edge is within the buffer.

    Raises:
        CRSMismatchError: If the CRSs differ under the reject policy
    """
    return _relate("within", _within_rows, left, right, config)
