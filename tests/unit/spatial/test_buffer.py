"""Unit tests for buffer construction."""

import math

import pytest

from spatialkit.config import ToolkitConfig
from spatialkit.errors import NonPositiveDistanceError, UnprojectedGeometryError
from spatialkit.models import FeatureCollection, Point, Polygon
from spatialkit.models.geometry import ring_signed_area
from spatialkit.spatial import area, buffer, buffer_collection, geometry_within
from spatialkit.spatial.primitives import Location, locate_point


def square(x0, y0, size):
    return Polygon.from_coordinates(
        [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)], crs=3310
    )


def test_point_buffer_contains_point_at_radius():
    """Test (3, 4) lies within buffer((0, 0), 5) under the inclusive policy."""
    circle = buffer(Point(0, 0, 3310), 5)

    assert geometry_within(Point(3, 4, 3310), circle)
    assert not geometry_within(Point(3, 4.5, 3310), circle)


def test_point_buffer_area_close_to_circle():
    """Test the circumscribed polygon slightly exceeds the exact circle area."""
    circle = buffer(Point(100, 100, 3310), 10, segments=64)

    exact = math.pi * 100
    assert area(circle).value > exact
    assert area(circle).value == pytest.approx(exact, rel=2e-3)


def test_buffer_segments_from_config():
    circle = buffer(Point(0, 0, 3310), 1, config=ToolkitConfig(buffer_segments=16))

    assert len(circle.shell) == 17


@pytest.mark.parametrize("distance", [0, -1, float("nan")])
def test_buffer_rejects_non_positive_distance(distance):
    """Test zero, negative and NaN distances are rejected."""
    with pytest.raises(NonPositiveDistanceError):
        buffer(Point(0, 0, 3310), distance)


def test_buffer_rejects_geographic_coordinates():
    with pytest.raises(UnprojectedGeometryError):
        buffer(Point(-120, 37, 4269), 100)


def test_square_buffer_area():
    """Test a square buffer approximates side^2 + 4*side*d + pi*d^2."""
    result = buffer(square(0, 0, 10), 2, segments=128)

    expected = 100 + 4 * 10 * 2 + math.pi * 4
    assert area(result).value >= expected
    assert area(result).value == pytest.approx(expected, rel=1e-3)
    assert result.bounds == pytest.approx((-2, -2, 12, 12), abs=0.01)
    assert not result.holes


def test_buffer_area_is_monotonic():
    """Test area(buffer(g, d2)) >= area(buffer(g, d1)) >= area(g) for d2 > d1."""
    polygon = Polygon.from_coordinates([(0, 0), (30, 0), (30, 10), (10, 10), (10, 30), (0, 30)], crs=3310)

    areas = [area(polygon).value] + [area(buffer(polygon, d)).value for d in (1, 3, 8)]

    assert areas == sorted(areas)
    assert len(set(areas)) == len(areas)


def test_buffer_contains_original_polygon():
    """Test every input polygon lies within its own buffer."""
    polygon = Polygon.from_coordinates([(0, 0), (30, 0), (30, 10), (10, 10), (10, 30), (0, 30)], crs=3310)

    result = buffer(polygon, 2)

    assert geometry_within(polygon, result)


def test_concave_buffer_fills_reflex_corner():
    """Test the reflex corner of an L shape is rounded over, not left as a notch."""
    polygon = Polygon.from_coordinates([(0, 0), (30, 0), (30, 10), (10, 10), (10, 30), (0, 30)], crs=3310)

    result = buffer(polygon, 2)

    # Just outside the reflex corner at (10, 10): within distance 2 of the input
    assert locate_point(11, 11, result) == Location.INTERIOR
    # Farther than 2 from the input
    assert locate_point(13, 13, result) == Location.EXTERIOR
    assert len(result.holes) == 0


def test_narrow_gap_closes():
    """Test a U shape whose gap is narrower than 2d becomes solid."""
    u_shape = Polygon.from_coordinates(
        [(0, 0), (30, 0), (30, 30), (20, 30), (20, 10), (10, 10), (10, 30), (0, 30)], crs=3310
    )

    result = buffer(u_shape, 6)

    assert locate_point(15, 20, result) == Location.INTERIOR
    assert not result.holes


def test_polygon_hole_shrinks():
    """Test a large hole shrinks by d and stays a hole."""
    polygon = Polygon.from_coordinates(
        [(0, 0), (100, 0), (100, 100), (0, 100)],
        [[(20, 20), (80, 20), (80, 80), (20, 80)]],
        crs=3310,
    )

    result = buffer(polygon, 5)

    assert len(result.holes) == 1
    assert ring_signed_area(result.holes[0]) < 0
    assert locate_point(50, 50, result) == Location.EXTERIOR
    assert locate_point(23, 50, result) == Location.INTERIOR
    # Hole shrinks from 60 x 60 to 50 x 50
    assert -ring_signed_area(result.holes[0]) == pytest.approx(2500.0)


def test_small_hole_is_filled():
    """Test a hole narrower than 2d disappears."""
    polygon = Polygon.from_coordinates(
        [(0, 0), (100, 0), (100, 100), (0, 100)],
        [[(45, 45), (55, 45), (55, 55), (45, 55)]],
        crs=3310,
    )

    result = buffer(polygon, 6)

    assert not result.holes
    assert locate_point(50, 50, result) == Location.INTERIOR


def test_buffer_keeps_lobes_outside_main_loop():
    """Test ground near every edge and spike tip is covered, not only the largest loop."""
    spiky = Polygon.from_coordinates(
        [(0, 0), (10, 0), (10, 4), (30, 5), (10, 6), (10, 10), (5, 10), (5, 25), (4, 10), (0, 10)],
        crs=3310,
    )
    distance = 1.5

    result = buffer(spiky, distance)

    for (x1, y1), (x2, y2) in zip(spiky.shell[:-1], spiky.shell[1:]):
        length = math.hypot(x2 - x1, y2 - y1)
        # Outward normal of a counter-clockwise shell is on the right
        nx, ny = (y2 - y1) / length, -(x2 - x1) / length
        for t in (0.1, 0.5, 0.9):
            x = x1 + t * (x2 - x1) + 0.99 * distance * nx
            y = y1 + t * (y2 - y1) + 0.99 * distance * ny
            assert locate_point(x, y, result) == Location.INTERIOR, (x, y)

    assert locate_point(31.4, 5, result) == Location.INTERIOR
    assert locate_point(5, 26.4, result) == Location.INTERIOR
    assert locate_point(32, 5, result) == Location.EXTERIOR
    assert geometry_within(spiky, result)
    assert not result.holes


def test_buffer_collection_keeps_attributes():
    """Test buffering a collection keeps order and attributes."""
    collection = FeatureCollection.from_geometries(
        [Point(0, 0, 3310), square(100, 100, 10)],
        [{"name": "Camp A"}, {"name": "Fire 1"}],
    )

    result = buffer_collection(collection, 5)

    assert result.column("name") == ["Camp A", "Fire 1"]
    assert all(isinstance(g, Polygon) for g in result.geometries)
    assert result.crs == collection.crs


def test_buffer_collection_rejects_non_positive_distance():
    collection = FeatureCollection.from_geometries([Point(0, 0, 3310)])

    with pytest.raises(NonPositiveDistanceError):
        buffer_collection(collection, 0)
