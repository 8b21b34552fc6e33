"""Unit tests for the smoke plume walkthrough."""

import pytest

from spatialkit.config import WalkthroughConfig
from spatialkit.walkthroughs import SmokePlumeWalkthrough
from spatialkit.walkthroughs.smoke import density_rank


@pytest.fixture
def inputs(smoke, fires, campgrounds):
    return {"smoke": smoke, "fires": fires, "campgrounds": campgrounds}


def test_density_rank():
    assert density_rank("Heavy") > density_rank("medium") > density_rank("LIGHT") > 0
    assert density_rank(None) == 0
    assert density_rank("unknown") == 0


def test_smoke_fire_pairs(inputs):
    """Test only the heavy plume overlaps a fire."""
    result = SmokePlumeWalkthrough(inputs, WalkthroughConfig(planar_crs=3310)).run()

    pairs = result["smoke_fire_pairs"]
    assert pairs.values.tolist() == [[0, "Heavy", 0, "Big"]]


def test_campground_smoke_reports_densest_plume(inputs):
    """Test Camp A is under two plumes and the medium one is the densest."""
    result = SmokePlumeWalkthrough(inputs, WalkthroughConfig(planar_crs=3310)).run()

    camps = result["campground_smoke"]
    assert camps["plumes"].tolist() == [2, 0, 0]
    assert camps["densest_density"].iloc[0] == "Medium"
    assert camps["densest_smoke_index"].iloc[0] == 2


def test_smoke_density_filter(inputs):
    """Test the density filter keeps original plume indices."""
    config = WalkthroughConfig(planar_crs=3310, smoke_density="light")

    result = SmokePlumeWalkthrough(inputs, config).run()

    assert result["smoke_fire_pairs"].empty
    assert result["smoke_areas"]["smoke_index"].tolist() == [1]
    assert result["campground_smoke"]["densest_smoke_index"].iloc[0] == 1


def test_smoke_areas(inputs):
    result = SmokePlumeWalkthrough(inputs, WalkthroughConfig(planar_crs=3310)).run()

    areas = result["smoke_areas"]
    assert areas["area_acre"].iloc[1] == pytest.approx(1e6 / 4046.8564224)
