"""Buffer construction for points and polygons.

Buffers are built in planar coordinates only. Circular arcs are
approximated by polygons that *circumscribe* the exact circle, so every
point within the buffer distance of the input is inside the result (the
approximation errs outward by at most ``d / cos(pi / segments) - d``).

Polygon buffers follow the winding-number offset construction:

1. Walk every ring with the material on the left and offset each edge to the
   right by ``d``. Convex corners are joined with a round arc, reflex corners
   are joined through the original vertex. The shell yields a
   counter-clockwise raw curve, each hole a clockwise one.
2. Node all raw curves against themselves and each other.
3. The buffer is the ground where the summed winding number of the raw curves
   is positive. A noded piece is kept as boundary when the winding number is
   positive on exactly one side, and turned so that side is on its left.
4. Boundary pieces are chained into rings. Counter-clockwise rings are shells
   and clockwise rings are holes; covered lobes that overlap the main body are
   merged into it because only their outer boundary survives step 3.
"""

import logging
import math
from collections import defaultdict

import numpy as np

from spatialkit.config import DEFAULT_CONFIG, ToolkitConfig
from spatialkit.errors import InvalidGeometryError, NonPositiveDistanceError
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import Point, Polygon, ring_signed_area
from spatialkit.spatial.primitives import (
    Location,
    locate_points,
    tolerance,
    winding_numbers,
)
from spatialkit.spatial.utils import require_projected

logger = logging.getLogger(__name__)

MIN_SEGMENTS = 8


def _check_distance(distance: float) -> float:
    distance = float(distance)
    if not math.isfinite(distance) or distance <= 0:
        msg = f"Buffer distance must be a positive number, got {distance}"
        raise NonPositiveDistanceError(msg)
    return distance


def _resolve_segments(segments: int | None, config: ToolkitConfig | None) -> int:
    if segments is None:
        segments = (config or DEFAULT_CONFIG).buffer_segments
    if segments < MIN_SEGMENTS:
        msg = f"segments must be >= {MIN_SEGMENTS}, got {segments}"
        raise ValueError(msg)
    return int(segments)


def circle_polygon(x: float, y: float, radius: float, segments: int, crs) -> Polygon:
    """Regular polygon circumscribing the circle of ``radius`` around (x, y)."""
    step = 2 * math.pi / segments
    outer_radius = radius / math.cos(step / 2)
    angles = (np.arange(segments) + 0.5) * step
    xs = x + outer_radius * np.cos(angles)
    ys = y + outer_radius * np.sin(angles)
    ring = list(zip(xs.tolist(), ys.tolist()))
    ring.append(ring[0])
    return Polygon((tuple(ring),), crs)


def _arc(cx, cy, start_angle, sweep, radius, segments) -> list[tuple[float, float]]:
    """Circumscribed polyline for an arc, excluding its two tangent end points."""
    full_step = 2 * math.pi / segments
    steps = max(1, math.ceil(abs(sweep) / full_step - 1e-9))
    step = sweep / steps
    outer_radius = radius / math.cos(step / 2)
    return [
        (
            cx + outer_radius * math.cos(start_angle + (k + 0.5) * step),
            cy + outer_radius * math.sin(start_angle + (k + 0.5) * step),
        )
        for k in range(steps)
    ]


def _raw_offset_curve(ring: np.ndarray, distance: float, segments: int) -> np.ndarray:
    """Offset a closed ring to its right, joining corners as described above."""
    pts = ring[:-1]
    n = len(pts)
    out: list[tuple[float, float]] = []

    for k in range(n):
        prev_pt = pts[k - 1]
        vertex = pts[k]
        next_pt = pts[(k + 1) % n]

        u_in = vertex - prev_pt
        u_out = next_pt - vertex
        len_in = math.hypot(u_in[0], u_in[1])
        len_out = math.hypot(u_out[0], u_out[1])
        if len_in == 0 or len_out == 0:
            continue
        u_in = u_in / len_in
        u_out = u_out / len_out

        # Right-hand normals
        n_in = np.array([u_in[1], -u_in[0]])
        n_out = np.array([u_out[1], -u_out[0]])

        cross = u_in[0] * u_out[1] - u_in[1] * u_out[0]
        dot = u_in[0] * u_out[0] + u_in[1] * u_out[1]
        turn = math.atan2(cross, dot)
        if dot < 0 and abs(cross) < 1e-12:
            # Hairpin: cap the tip with a half circle
            turn = math.pi

        p_in = vertex + distance * n_in
        p_out = vertex + distance * n_out

        if abs(turn) < 1e-12:
            out.append((float(p_out[0]), float(p_out[1])))
        elif turn > 0:
            # Left turn with material on the left: the offset side opens up
            start = math.atan2(n_in[1], n_in[0])
            out.append((float(p_in[0]), float(p_in[1])))
            out.extend(_arc(vertex[0], vertex[1], start, turn, distance, segments))
            out.append((float(p_out[0]), float(p_out[1])))
        else:
            out.append((float(p_in[0]), float(p_in[1])))
            out.append((float(vertex[0]), float(vertex[1])))
            out.append((float(p_out[0]), float(p_out[1])))

    curve = np.array(out, dtype=float)
    return _drop_repeated(curve, tolerance(curve))


def _drop_repeated(points: np.ndarray, eps: float) -> np.ndarray:
    """Remove consecutive (cyclically) duplicate points."""
    if len(points) < 2:
        return points
    keep = [0]
    for k in range(1, len(points)):
        if np.hypot(*(points[k] - points[keep[-1]])) > eps:
            keep.append(k)
    if len(keep) > 1 and np.hypot(*(points[keep[-1]] - points[keep[0]])) <= eps:
        keep.pop()
    return points[keep]


class _NodeIndex:
    """Merges points closer than ``radius`` into shared node ids."""

    def __init__(self, radius: float):
        self.radius = radius
        self._cells: dict[tuple[int, int], list[int]] = {}
        self._points: list[tuple[float, float]] = []

    def add(self, point) -> int:
        x, y = float(point[0]), float(point[1])
        cx = math.floor(x / self.radius)
        cy = math.floor(y / self.radius)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for k in self._cells.get((cx + dx, cy + dy), ()):
                    px, py = self._points[k]
                    if math.hypot(px - x, py - y) <= self.radius:
                        return k
        k = len(self._points)
        self._points.append((x, y))
        self._cells.setdefault((cx, cy), []).append(k)
        return k

    def array(self) -> np.ndarray:
        return np.array(self._points, dtype=float).reshape(-1, 2)


def _curve_segments(curves: list[np.ndarray]) -> np.ndarray:
    """Segments of closed polylines; segment k runs from point k to point k + 1."""
    return np.vstack([np.hstack([c, np.roll(c, -1, axis=0)]) for c in curves])


def _add_overlap(splits, i: int, j: int, starts: np.ndarray, ends: np.ndarray, eps: float) -> None:
    """Split two collinear segments at each other's end points."""
    for a, b in ((i, j), (j, i)):
        p = starts[a]
        r = ends[a] - p
        length_sq = float(r @ r)
        tol = eps / math.sqrt(length_sq)
        for point in (starts[b], ends[b]):
            t = float((point - p) @ r) / length_sq
            if tol < t < 1 - tol:
                splits[a].append((t, point))


def _split_points(segments: np.ndarray, eps: float) -> list[list[tuple[float, np.ndarray]]]:
    """Where each segment is crossed or touched by any other segment.

    Returns, per segment, ``(t, point)`` pairs with ``t`` strictly inside
    (0, 1). A crossing that falls on an end point of either segment reuses
    that end point's exact coordinates.
    """
    n = len(segments)
    starts = segments[:, :2]
    ends = segments[:, 2:]
    lengths = np.hypot(ends[:, 0] - starts[:, 0], ends[:, 1] - starts[:, 1])
    minx = np.minimum(starts[:, 0], ends[:, 0])
    maxx = np.maximum(starts[:, 0], ends[:, 0])
    miny = np.minimum(starts[:, 1], ends[:, 1])
    maxy = np.maximum(starts[:, 1], ends[:, 1])

    order = np.argsort(minx, kind="stable")
    sorted_minx = minx[order]

    splits: list[list[tuple[float, np.ndarray]]] = [[] for _ in range(n)]
    for pos, i in enumerate(order):
        i = int(i)
        # Segments whose x-range starts before this one's ends
        stop = np.searchsorted(sorted_minx, maxx[i] + eps, side="right")
        cand = order[pos + 1:stop]
        cand = cand[(miny[cand] <= maxy[i] + eps) & (maxy[cand] >= miny[i] - eps)]
        if len(cand) == 0:
            continue

        p = starts[i]
        r = ends[i] - p
        q = starts[cand]
        s = ends[cand] - q
        qp = q - p
        denom = r[0] * s[:, 1] - r[1] * s[:, 0]
        with np.errstate(invalid="ignore", divide="ignore"):
            t = (qp[:, 0] * s[:, 1] - qp[:, 1] * s[:, 0]) / denom
            u = (qp[:, 0] * r[1] - qp[:, 1] * r[0]) / denom
        parallel = np.abs(denom) <= 1e-12 * lengths[i] * lengths[cand]
        tol_t = eps / lengths[i]
        tol_u = eps / lengths[cand]

        crossing = (
            ~parallel
            & (t >= -tol_t) & (t <= 1 + tol_t)
            & (u >= -tol_u) & (u <= 1 + tol_u)
        )
        for j, tj, uj, tol in zip(cand[crossing], t[crossing], u[crossing], tol_u[crossing]):
            j = int(j)
            if tj <= tol_t:
                point = starts[i]
            elif tj >= 1 - tol_t:
                point = ends[i]
            elif uj <= tol:
                point = starts[j]
            elif uj >= 1 - tol:
                point = ends[j]
            else:
                point = p + tj * r
            if tol_t < tj < 1 - tol_t:
                splits[i].append((float(tj), point))
            if tol < uj < 1 - tol:
                splits[j].append((float(uj), point))

        off_line = np.abs(qp[:, 0] * r[1] - qp[:, 1] * r[0]) / lengths[i]
        for j in cand[parallel & (off_line <= eps)]:
            _add_overlap(splits, i, int(j), starts, ends, eps)
    return splits


def _arrangement(segments: np.ndarray, eps: float) -> tuple[np.ndarray, np.ndarray]:
    """Node every segment against every other one.

    Returns:
        Tuple of ``(nodes, pieces)``: node coordinates as an (m, 2) array and
        the pieces between consecutive nodes as a (k, 2) array of node ids,
        each directed the same way as the segment it came from
    """
    splits = _split_points(segments, eps)
    index = _NodeIndex(eps)
    pieces = []
    for k, segment in enumerate(segments):
        chain = [segment[:2]]
        chain.extend(point for _, point in sorted(splits[k], key=lambda s: s[0]))
        chain.append(segment[2:])
        ids = [index.add(point) for point in chain]
        pieces.extend((a, b) for a, b in zip(ids, ids[1:]) if a != b)
    return index.array(), np.array(pieces, dtype=int).reshape(-1, 2)


def _boundary_edges(
    nodes: np.ndarray,
    pieces: np.ndarray,
    segments: np.ndarray,
    distance: float,
    eps: float,
) -> list[tuple[int, int]]:
    """Pieces with positive winding on exactly one side, turned to keep it on the left.

    Coincident pieces are merged first. Crossing a piece from its right to its
    left raises the winding number by the net count of pieces running that
    way, so only the right side needs sampling.
    """
    if len(pieces) == 0:
        return []
    net: dict[tuple[int, int], int] = defaultdict(int)
    for start, end in pieces.tolist():
        if start < end:
            net[(start, end)] += 1
        else:
            net[(end, start)] -= 1
    pairs = np.array(list(net), dtype=int)
    counts = np.array(list(net.values()), dtype=int)

    a = nodes[pairs[:, 0]]
    b = nodes[pairs[:, 1]]
    direction = b - a
    length = np.hypot(direction[:, 0], direction[:, 1])
    left = np.column_stack([-direction[:, 1], direction[:, 0]]) / length[:, None]
    step = np.maximum(np.minimum(0.1 * length, 1e-5 * distance), 8 * eps)
    mid = (a + b) / 2

    right_winding = winding_numbers(mid - left * step[:, None], segments)
    inside_right = right_winding > 0
    inside_left = right_winding + counts > 0

    forward = pairs[inside_left & ~inside_right]
    backward = pairs[inside_right & ~inside_left][:, ::-1]
    return [(int(s), int(e)) for s, e in np.vstack([forward, backward])]


def _turn(nodes: np.ndarray, incoming: np.ndarray, start: int, end: int) -> float:
    outgoing = nodes[end] - nodes[start]
    cross = incoming[0] * outgoing[1] - incoming[1] * outgoing[0]
    dot = incoming[0] * outgoing[0] + incoming[1] * outgoing[1]
    return math.atan2(cross, dot)


def _chain_rings(nodes: np.ndarray, edges: list[tuple[int, int]]) -> list[np.ndarray]:
    """Link directed boundary edges into closed rings.

    At a node with several unused outgoing edges the walk takes the sharpest
    right turn, so lobes that only touch at a point end up in one ring.
    """
    outgoing: dict[int, list[int]] = defaultdict(list)
    for k, (start, _end) in enumerate(edges):
        outgoing[start].append(k)

    used = [False] * len(edges)
    rings = []
    for first in range(len(edges)):
        if used[first]:
            continue
        used[first] = True
        origin = edges[first][0]
        path = [origin]
        current = first
        closed = False
        while True:
            start, end = edges[current]
            path.append(end)
            candidates = [k for k in outgoing[end] if not used[k]]
            if end == origin:
                candidates.append(first)
            if not candidates:
                break
            incoming = nodes[end] - nodes[start]
            current = min(candidates, key=lambda k: _turn(nodes, incoming, end, edges[k][1]))
            if current == first:
                closed = True
                break
            used[current] = True

        if closed and len(path) >= 4:
            rings.append(nodes[path])
        else:
            logger.debug(f"Dropping open buffer boundary chain of {len(path) - 1} edge(s)")
    return rings


def _buffer_polygon(polygon: Polygon, distance: float, segments: int) -> Polygon:
    curves = [_raw_offset_curve(ring, distance, segments) for ring in polygon.ring_arrays]
    curves = [c for c in curves if len(c) >= 3]
    eps = tolerance(polygon.vertices(), *curves) + distance * 1e-9

    raw_segments = _curve_segments(curves)
    nodes, pieces = _arrangement(raw_segments, eps)
    edges = _boundary_edges(nodes, pieces, raw_segments, distance, eps)

    shells: list[np.ndarray] = []
    holes: list[np.ndarray] = []
    for ring in _chain_rings(nodes, edges):
        signed = ring_signed_area(ring)
        if signed > eps * eps:
            shells.append(ring)
        elif signed < -eps * eps:
            holes.append(ring)

    if not shells:
        msg = "Buffer produced no enclosing ring"
        raise InvalidGeometryError(msg)
    if len(shells) > 1:
        logger.warning(f"Buffer boundary split into {len(shells)} shells, keeping the largest")

    shell = max(shells, key=ring_signed_area)
    shell_polygon = Polygon((tuple(map(tuple, shell.tolist())),), polygon.crs)
    kept = [
        hole
        for hole in holes
        if np.any(locate_points(hole[:-1], shell_polygon) == Location.INTERIOR)
    ]

    logger.debug(
        f"Buffered polygon: {len(edges)} boundary edge(s), {len(shells)} shell(s), "
        f"{len(kept)} hole(s) kept"
    )
    return Polygon.from_coordinates(
        shell.tolist(), [h.tolist() for h in kept], crs=polygon.crs
    )



def buffer(
    geometry: Point | Polygon,
    distance: float,
    segments: int | None = None,
    config: ToolkitConfig | None = None,
) -> Polygon:
    """Expand a geometry by a planar distance into a polygon.

    Args:
        geometry: Point or Polygon in a projected CRS
        distance: Buffer distance in CRS units (metres), must be > 0
        segments: Vertices per full circle (default: ToolkitConfig.buffer_segments)
        config: Toolkit configuration

    Returns:
        Polygon containing every point within ``distance`` of ``geometry``

    Raises:
        NonPositiveDistanceError: If distance <= 0
        UnprojectedGeometryError: If the geometry is in a geographic CRS
    """
    distance = _check_distance(distance)
    require_projected(geometry.crs, "Buffer")
    segments = _resolve_segments(segments, config)

    if isinstance(geometry, Point):
        return circle_polygon(geometry.x, geometry.y, distance, segments, geometry.crs)
    return _buffer_polygon(geometry, distance, segments)


def buffer_collection(
    collection: FeatureCollection,
    distance: float,
    segments: int | None = None,
    config: ToolkitConfig | None = None,
) -> FeatureCollection:
    """Buffer every feature, keeping attributes and order.

    Raises:
        NonPositiveDistanceError: If distance <= 0
        UnprojectedGeometryError: If the collection is in a geographic CRS
    """
    distance = _check_distance(distance)
    require_projected(collection.crs, "Buffer")
    segments = _resolve_segments(segments, config)

    logger.info(f"Buffering {len(collection)} features by {distance:g} m")
    return collection.map_geometries(lambda g: buffer(g, distance, segments))
