"""Synthetic wildfire layers in California Albers (EPSG:3310)."""

import pytest

from spatialkit.models import FeatureCollection, Point, Polygon


def square(x0, y0, size):
    return Polygon.from_coordinates(
        [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)], crs=3310
    )


@pytest.fixture
def fires():
    """A 10 km square fire (~24,711 acres) and a 100 m square fire (~2.5 acres)."""
    return FeatureCollection.from_geometries(
        [square(0, 0, 10_000), square(50_000, 50_000, 100)],
        [{"name": "Big"}, {"name": "Small"}],
    )


@pytest.fixture
def campgrounds():
    """Campgrounds 1 km and 5 km east of the big fire, and one inside the small fire."""
    return FeatureCollection.from_geometries(
        [Point(11_000, 5_000, 3310), Point(15_000, 5_000, 3310), Point(50_050, 50_050, 3310)],
        [{"name": "Camp A"}, {"name": "Camp B"}, {"name": "Camp C"}],
    )


@pytest.fixture
def smoke():
    """A heavy plume over the big fire and two plumes over Camp A."""
    return FeatureCollection.from_geometries(
        [square(-5_000, -5_000, 8_000), square(10_500, 4_500, 1_000), square(10_800, 4_800, 500)],
        [{"Density": "Heavy"}, {"Density": "Light"}, {"Density": "Medium"}],
    )
