"""Unit tests for the command line interface."""

import json
import logging
from pathlib import Path

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point, box
from typer.testing import CliRunner

from spatialkit import cli
from spatialkit.cli import app, configure_logging
from spatialkit.projection import transform_coordinates

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_debug_output(monkeypatch):
    monkeypatch.delenv("DEBUG_OUTPUT", raising=False)


@pytest.fixture
def fires_path(tmp_path):
    """A 10 km square fire in California Albers."""
    path = tmp_path / "fires.gpkg"
    gpd.GeoDataFrame(
        {"name": ["Big"]}, geometry=[box(0, 0, 10_000, 10_000)], crs="EPSG:3310"
    ).to_file(path, driver="GPKG")
    return path


@pytest.fixture
def campgrounds_gpkg(tmp_path):
    path = tmp_path / "campgrounds.gpkg"
    gpd.GeoDataFrame(
        {"name": ["Inside", "Outside"]},
        geometry=[Point(5_000, 5_000), Point(20_000, 5_000)],
        crs="EPSG:3310",
    ).to_file(path, driver="GPKG")
    return path


@pytest.fixture
def campgrounds_csv(tmp_path):
    """Campgrounds 1 km and 10 km east of the fire, as NAD83 longitude/latitude."""
    lons, lats = transform_coordinates([11_000, 20_000], [5_000, 5_000], 3310, 4269)
    path = tmp_path / "campgrounds.csv"
    pd.DataFrame(
        {"name": ["Near", "Far"], "longitude": lons, "latitude": lats}
    ).to_csv(path, index=False)
    return path


def test_validate_reports_ok(fires_path, campgrounds_csv):
    result = runner.invoke(app, ["validate", str(fires_path), str(campgrounds_csv)])

    assert result.exit_code == 0, result.output
    assert f"{fires_path}: OK" in result.output
    assert f"{campgrounds_csv}: OK" in result.output


def test_validate_reports_problems(tmp_path):
    """Test a table without a latitude column fails validation."""
    path = tmp_path / "bad.csv"
    pd.DataFrame({"longitude": [-120.0]}).to_csv(path, index=False)

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "1 problem(s)" in result.output
    assert "[columns]" in result.output


def test_area_writes_csv(fires_path, tmp_path):
    output = tmp_path / "areas.csv"

    result = runner.invoke(
        app, ["area", str(fires_path), "--unit", "ha", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    df = pd.read_csv(output)
    assert df["name"].tolist() == ["Big"]
    assert df["area_ha"].iloc[0] == pytest.approx(10_000.0)


def test_area_planar_crs_defaults_to_config(fires_path, monkeypatch):
    """Test --planar-crs falls back to SPATIALKIT_PLANAR_CRS."""
    monkeypatch.setenv("SPATIALKIT_PLANAR_CRS", "4269")

    # Measuring in geographic degrees is refused, so the setting was honoured
    assert runner.invoke(app, ["area", str(fires_path)]).exit_code == 1

    result = runner.invoke(app, ["area", str(fires_path), "--planar-crs", "5070", "--unit", "ha"])
    assert result.exit_code == 0, result.output


def test_relate_within_writes_pairs(campgrounds_gpkg, fires_path, tmp_path):
    output = tmp_path / "within.csv"

    result = runner.invoke(
        app,
        ["relate", str(campgrounds_gpkg), str(fires_path), "-p", "within", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    df = pd.read_csv(output)
    assert df.values.tolist() == [[0, 0]]


def test_relate_rejects_unknown_predicate(campgrounds_gpkg, fires_path):
    result = runner.invoke(
        app, ["relate", str(campgrounds_gpkg), str(fires_path), "-p", "touches"]
    )

    assert result.exit_code == 2


def test_run_fires_writes_tables(fires_path, campgrounds_csv, tmp_path):
    """Test the fires walkthrough end to end from files."""
    output_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "run",
            "fires",
            "--fires",
            str(fires_path),
            "--campgrounds",
            str(campgrounds_csv),
            "--output-dir",
            str(output_dir),
            "--buffer-m",
            "2000",
        ],
    )

    assert result.exit_code == 0, result.output
    for name in ("fire_areas", "campground_exposure", "evacuation_pairs", "distance_matrix"):
        assert (output_dir / f"fires_{name}.csv").exists()

    exposure = pd.read_csv(output_dir / "fires_campground_exposure.csv")
    assert exposure["evacuation_zones"].tolist() == [1, 0]
    assert exposure["distance_m"].iloc[0] == pytest.approx(1_000.0, abs=1e-3)


def test_run_unknown_walkthrough_exits_with_error(fires_path, campgrounds_csv, tmp_path):
    result = runner.invoke(
        app,
        [
            "run",
            "floods",
            "--fires",
            str(fires_path),
            "--campgrounds",
            str(campgrounds_csv),
            "--output-dir",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 1


def test_run_skip_missing_coordinates(fires_path, tmp_path):
    """Test --skip-missing drops rows that would otherwise fail the load."""
    campgrounds = tmp_path / "partial.csv"
    pd.DataFrame(
        {"name": ["Good", "Bad"], "longitude": [-120.0, None], "latitude": [37.0, 37.0]}
    ).to_csv(campgrounds, index=False)
    args = ["run", "fires", "--fires", str(fires_path), "--campgrounds", str(campgrounds)]

    rejected = runner.invoke(app, [*args, "--output-dir", str(tmp_path / "a")])
    skipped = runner.invoke(app, [*args, "--output-dir", str(tmp_path / "b"), "--skip-missing"])

    assert rejected.exit_code == 1
    assert skipped.exit_code == 0, skipped.output
    exposure = pd.read_csv(tmp_path / "b" / "fires_campground_exposure.csv")
    assert exposure["campground"].tolist() == ["Good"]


@pytest.fixture
def restore_logger_levels():
    names = ("spatialkit", "pyogrio")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_configure_logging_uses_packaged_config(tmp_path, monkeypatch, restore_logger_levels):
    """Test the logging.json shipped inside the package is found from any directory."""
    monkeypatch.chdir(tmp_path)
    logging.getLogger("pyogrio").setLevel(logging.NOTSET)

    configure_logging()

    assert cli._logging_config_path() == Path(cli.__file__).parent / "logging.json"
    assert cli._logging_config_path().exists()
    assert logging.getLogger("pyogrio").level == logging.WARNING


def test_configure_logging_prefers_working_directory(tmp_path, monkeypatch, restore_logger_levels):
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "loggers": {"spatialkit": {"level": "ERROR"}},
    }
    (tmp_path / "logging.json").write_text(json.dumps(config))
    monkeypatch.chdir(tmp_path)

    configure_logging()

    assert logging.getLogger("spatialkit").level == logging.ERROR
