"""Low-level planar geometry primitives.

Vectorised helpers shared by measurement, buffering and predicate
evaluation. Segments are (k, 4) arrays of ``x1, y1, x2, y2``. Comparisons
use an absolute tolerance scaled to the magnitude of the coordinates, so a
point within that tolerance of a boundary counts as on it.
"""

from enum import IntEnum

import numpy as np

from spatialkit.models.geometry import Point, Polygon

# Relative tolerance applied to the largest coordinate magnitude
RELATIVE_EPSILON = 1e-9


class Location(IntEnum):
    """Where a point lies relative to a polygon."""

    EXTERIOR = 0
    BOUNDARY = 1
    INTERIOR = 2


def tolerance(*arrays: np.ndarray) -> float:
    """Absolute comparison tolerance for the given coordinate arrays."""
    scale = 1.0
    for arr in arrays:
        if arr is not None and np.size(arr):
            scale = max(scale, float(np.max(np.abs(arr))))
    return RELATIVE_EPSILON * scale


def geometry_tolerance(*geometries: Point | Polygon) -> float:
    return tolerance(*(g.vertices() for g in geometries))


def point_segment_distances(x: float, y: float, segments: np.ndarray) -> np.ndarray:
    """Distance from (x, y) to each segment."""
    x1, y1, x2, y2 = segments[:, 0], segments[:, 1], segments[:, 2], segments[:, 3]
    dx = x2 - x1
    dy = y2 - y1
    length_sq = dx * dx + dy * dy
    with np.errstate(invalid="ignore", divide="ignore"):
        t = ((x - x1) * dx + (y - y1) * dy) / length_sq
    t = np.where(length_sq > 0, np.clip(t, 0.0, 1.0), 0.0)
    px = x1 + t * dx
    py = y1 + t * dy
    return np.hypot(x - px, y - py)


def points_segments_min_distance(points: np.ndarray, segments: np.ndarray) -> float:
    """Smallest distance from any point to any segment."""
    if len(points) == 0 or len(segments) == 0:
        return float("inf")
    return float(min(point_segment_distances(px, py, segments).min() for px, py in points))


def _signed_distances(px, py, segments: np.ndarray) -> np.ndarray:
    """Signed distance of points from the infinite lines through segments.

    ``px``/``py`` broadcast against the segment columns.
    """
    x1, y1, x2, y2 = segments[..., 0], segments[..., 1], segments[..., 2], segments[..., 3]
    dx = x2 - x1
    dy = y2 - y1
    length = np.hypot(dx, dy)
    with np.errstate(invalid="ignore", divide="ignore"):
        d = (dx * (py - y1) - dy * (px - x1)) / length
    return np.where(length > 0, d, np.hypot(px - x1, py - y1))


def _within_box(px, py, segments: np.ndarray, eps: float) -> np.ndarray:
    x1, y1, x2, y2 = segments[..., 0], segments[..., 1], segments[..., 2], segments[..., 3]
    return (
        (px >= np.minimum(x1, x2) - eps)
        & (px <= np.maximum(x1, x2) + eps)
        & (py >= np.minimum(y1, y2) - eps)
        & (py <= np.maximum(y1, y2) + eps)
    )


def segment_relations(
    a: np.ndarray, b: np.ndarray, eps: float
) -> tuple[np.ndarray, np.ndarray]:
    """Intersection tests between every segment of ``a`` and every segment of ``b``.

    Args:
        a: (p, 4) segments
        b: (q, 4) segments
        eps: Absolute tolerance

    Returns:
        Tuple of (p, q) boolean arrays ``(touch_or_cross, proper_cross)``.
        ``proper_cross`` is true only when the segments cross at a single
        point interior to both; touching and collinear overlap are excluded.
    """
    A = a[:, None, :]
    B = b[None, :, :]

    d1 = _signed_distances(A[..., 0], A[..., 1], B)
    d2 = _signed_distances(A[..., 2], A[..., 3], B)
    d3 = _signed_distances(B[..., 0], B[..., 1], A)
    d4 = _signed_distances(B[..., 2], B[..., 3], A)

    proper = (
        (((d1 > eps) & (d2 < -eps)) | ((d1 < -eps) & (d2 > eps)))
        & (((d3 > eps) & (d4 < -eps)) | ((d3 < -eps) & (d4 > eps)))
    )

    touch = (
        ((np.abs(d1) <= eps) & _within_box(A[..., 0], A[..., 1], B, eps))
        | ((np.abs(d2) <= eps) & _within_box(A[..., 2], A[..., 3], B, eps))
        | ((np.abs(d3) <= eps) & _within_box(B[..., 0], B[..., 1], A, eps))
        | ((np.abs(d4) <= eps) & _within_box(B[..., 2], B[..., 3], A, eps))
    )

    return proper | touch, proper


def segments_touch_or_cross(a: np.ndarray, b: np.ndarray, eps: float, chunk: int = 512) -> bool:
    """True if any segment of ``a`` shares a point with any segment of ``b``."""
    for start in range(0, len(a), chunk):
        hits, _ = segment_relations(a[start:start + chunk], b, eps)
        if hits.any():
            return True
    return False


def segments_cross_properly(a: np.ndarray, b: np.ndarray, eps: float, chunk: int = 512) -> bool:
    """True if any segment of ``a`` properly crosses any segment of ``b``."""
    for start in range(0, len(a), chunk):
        _, proper = segment_relations(a[start:start + chunk], b, eps)
        if proper.any():
            return True
    return False


def points_in_ring(points: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """Even-odd ray casting; True where a point is strictly inside the ring.

    Points on the ring's boundary give an arbitrary answer here; callers test
    the boundary first.
    """
    x = points[:, 0][:, None]
    y = points[:, 1][:, None]
    x1 = ring[:-1, 0][None, :]
    y1 = ring[:-1, 1][None, :]
    x2 = ring[1:, 0][None, :]
    y2 = ring[1:, 1][None, :]

    straddles = (y1 > y) != (y2 > y)
    with np.errstate(invalid="ignore", divide="ignore"):
        x_cross = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
    crossings = straddles & (x < x_cross)
    return (np.count_nonzero(crossings, axis=1) % 2) == 1


def locate_points(points: np.ndarray, polygon: Polygon, eps: float | None = None) -> np.ndarray:
    """Location (as Location values) of each point relative to a polygon."""
    points = np.atleast_2d(np.asarray(points, dtype=float))
    if eps is None:
        eps = tolerance(points, polygon.vertices())

    result = np.full(len(points), Location.EXTERIOR, dtype=int)
    if len(points) == 0:
        return result

    edges = polygon.edges()
    on_boundary = np.array(
        [point_segment_distances(px, py, edges).min() <= eps for px, py in points]
    )

    rings = polygon.ring_arrays
    inside = points_in_ring(points, rings[0])
    for hole in rings[1:]:
        inside &= ~points_in_ring(points, hole)

    result[inside] = Location.INTERIOR
    result[on_boundary] = Location.BOUNDARY
    return result


def locate_point(x: float, y: float, polygon: Polygon, eps: float | None = None) -> Location:
    return Location(int(locate_points(np.array([[x, y]]), polygon, eps)[0]))


def bounds_overlap(a: tuple, b: tuple, eps: float = 0.0) -> bool:
    """Whether two (minx, miny, maxx, maxy) boxes share at least one point."""
    return not (
        a[2] < b[0] - eps or b[2] < a[0] - eps or a[3] < b[1] - eps or b[3] < a[1] - eps
    )


def winding_numbers(points: np.ndarray, segments: np.ndarray, chunk: int = 128) -> np.ndarray:
    """Winding number of closed curves (given as segments) around each point."""
    points = np.atleast_2d(np.asarray(points, dtype=float))
    result = np.zeros(len(points), dtype=int)
    low = np.minimum(segments[:, 1], segments[:, 3])
    high = np.maximum(segments[:, 1], segments[:, 3])

    # Points sorted by y so each chunk only meets segments spanning its y range
    order = np.argsort(points[:, 1], kind="stable")
    for start in range(0, len(points), chunk):
        rows = order[start:start + chunk]
        block = points[rows]
        spans = segments[(high >= block[:, 1].min()) & (low <= block[:, 1].max())]
        if len(spans) == 0:
            continue
        x1, y1, x2, y2 = (spans[None, :, k] for k in range(4))
        x = block[:, 0][:, None]
        y = block[:, 1][:, None]
        side = (x2 - x1) * (y - y1) - (x - x1) * (y2 - y1)
        upward = (y1 <= y) & (y2 > y) & (side > 0)
        downward = (y1 > y) & (y2 <= y) & (side < 0)
        result[rows] = upward.sum(axis=1) - downward.sum(axis=1)
    return result


def split_midpoints(segments: np.ndarray, cutters: np.ndarray, eps: float) -> np.ndarray:
    """Midpoints of the pieces left after cutting segments with other segments.

    Each segment is cut wherever a cutter crosses it or a cutter end point
    lies on it, so no piece crosses from one side of a cutter to the other.
    """
    cutter_points = np.vstack([cutters[:, :2], cutters[:, 2:]])
    q = cutters[:, :2]
    s = cutters[:, 2:] - q
    midpoints = []
    for segment in segments:
        p = segment[:2]
        r = segment[2:] - p
        length_sq = float(r @ r)
        if length_sq == 0:
            continue
        cuts = [0.0, 1.0]

        t = (cutter_points - p) @ r / length_sq
        offset = np.hypot(*(cutter_points - (p + t[:, None] * r)).T)
        cuts.extend(t[(offset <= eps) & (t > 0) & (t < 1)])

        qp = q - p
        denom = r[0] * s[:, 1] - r[1] * s[:, 0]
        with np.errstate(invalid="ignore", divide="ignore"):
            tc = (qp[:, 0] * s[:, 1] - qp[:, 1] * s[:, 0]) / denom
            uc = (qp[:, 0] * r[1] - qp[:, 1] * r[0]) / denom
        crossing = (denom != 0) & (tc > 0) & (tc < 1) & (uc >= 0) & (uc <= 1)
        cuts.extend(tc[crossing])

        cuts = np.unique(np.asarray(cuts, dtype=float))
        mids = (cuts[:-1] + cuts[1:]) / 2
        midpoints.append(p + mids[:, None] * r)
    if not midpoints:
        return np.empty((0, 2))
    return np.vstack(midpoints)


def interior_point(polygon: Polygon, eps: float | None = None) -> tuple[float, float]:
    """A point strictly inside the polygon.

    Steps inward from the midpoint of the longest shell edge, halfway to the
    next boundary crossing.
    """
    if eps is None:
        eps = tolerance(polygon.vertices())
    shell = polygon.ring_arrays[0]
    starts = shell[:-1]
    ends = shell[1:]
    lengths = np.hypot(ends[:, 0] - starts[:, 0], ends[:, 1] - starts[:, 1])
    k = int(np.argmax(lengths))
    mid = (starts[k] + ends[k]) / 2
    direction = (ends[k] - starts[k]) / lengths[k]
    # Shell is counter-clockwise, so the interior is on the left
    inward = np.array([-direction[1], direction[0]])

    edges = polygon.edges()
    q = edges[:, :2]
    s = edges[:, 2:] - q
    qm = q - mid
    denom = inward[0] * s[:, 1] - inward[1] * s[:, 0]
    with np.errstate(invalid="ignore", divide="ignore"):
        reach = (qm[:, 0] * s[:, 1] - qm[:, 1] * s[:, 0]) / denom
        u = (qm[:, 0] * inward[1] - qm[:, 1] * inward[0]) / denom
    hits = reach[(denom != 0) & (u >= 0) & (u <= 1) & (reach > eps)]
    depth = float(hits.min()) / 2 if len(hits) else eps
    point = mid + depth * inward
    return float(point[0]), float(point[1])
