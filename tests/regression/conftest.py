"""Regression test fixtures.

Shared layers for cross-checking spatialkit against shapely and pyproj.
"""

import pytest
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon


@pytest.fixture
def tolerance() -> dict[str, float]:
    """Numerical tolerance for comparing outputs.

    Returns:
        Dictionary of tolerances for different value types
    """
    return {
        "absolute": 1e-6,  # metres / square metres
        "relative": 1e-9,
    }


@pytest.fixture
def shapely_polygons() -> list:
    """Convex, concave and holed polygons in metres."""
    return [
        ShapelyPolygon([(0, 0), (4_000, 0), (4_000, 3_000), (0, 3_000)]),
        ShapelyPolygon([(5_000, 0), (9_000, 0), (9_000, 1_000), (6_000, 1_000), (6_000, 4_000), (5_000, 4_000)]),
        ShapelyPolygon(
            [(-6_000, -6_000), (-1_000, -6_000), (-1_000, -1_000), (-6_000, -1_000)],
            [[(-4_000, -4_000), (-3_000, -4_000), (-3_000, -3_000), (-4_000, -3_000)]],
        ),
        ShapelyPolygon([(2_000, 2_000), (7_000, 2_500), (3_000, 6_000)]),
    ]


@pytest.fixture
def shapely_points() -> list:
    """Points inside, outside, on the boundary of and inside a hole of the polygons."""
    return [
        ShapelyPoint(1_000, 1_000),
        ShapelyPoint(4_000, 1_500),
        ShapelyPoint(-3_500, -3_500),
        ShapelyPoint(12_000, -8_000),
        ShapelyPoint(5_500, 3_000),
        ShapelyPoint(3_500, 2_600),
    ]

