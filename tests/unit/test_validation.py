"""Unit tests for input validators."""

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import LineString
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon as ShapelyPolygon

from spatialkit.validation import TableValidator, VectorFileValidator
from spatialkit.validation.vector import POLYGON_TYPES


@pytest.fixture
def valid_geojson(tmp_path):
    gdf = gpd.GeoDataFrame(
        {"name": ["Oak"]},
        geometry=[ShapelyPolygon([(0, 0), (10, 0), (10, 10), (0, 10)])],
        crs="EPSG:3310",
    )
    path = tmp_path / "fires.geojson"
    gdf.to_file(path, driver="GeoJSON")
    return path


def test_valid_vector_file(valid_geojson):
    assert VectorFileValidator().validate(valid_geojson) == []


def test_missing_file(tmp_path):
    errors = VectorFileValidator().validate(tmp_path / "missing.geojson")

    assert len(errors) == 1
    assert errors[0].field == "path"


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "fires.kml"
    path.write_text("<kml/>")

    errors = VectorFileValidator().validate(path)

    assert errors[0].field == "path"


def test_shapefile_missing_components(tmp_path):
    """Test a lone .shp without .shx/.dbf/.prj is reported per component."""
    path = tmp_path / "fires.shp"
    path.write_bytes(b"")

    errors = VectorFileValidator().validate(path)

    assert {e.message.rsplit(" ", 1)[-1] for e in errors} == {".shx", ".dbf", ".prj"}


def test_wrong_geometry_type_and_crs(tmp_path):
    """Test line geometries and an unregistered CRS are both reported."""
    gdf = gpd.GeoDataFrame(
        {"name": ["road"]}, geometry=[LineString([(0, 0), (1, 1)])], crs="EPSG:4326"
    )
    path = tmp_path / "roads.geojson"
    gdf.to_file(path, driver="GeoJSON")

    errors = VectorFileValidator().validate(path)

    fields = sorted(e.field for e in errors)
    assert fields == ["crs", "geometry"]


def test_point_layer_rejected_when_polygons_required(tmp_path):
    gdf = gpd.GeoDataFrame({"name": ["A"]}, geometry=[ShapelyPoint(0, 0)], crs="EPSG:3310")
    path = tmp_path / "camps.geojson"
    gdf.to_file(path, driver="GeoJSON")

    errors = VectorFileValidator(allowed_types=POLYGON_TYPES).validate(path)

    assert len(errors) == 1
    assert "Point" in errors[0].message


def test_invalid_polygon_reported(tmp_path):
    bowtie = ShapelyPolygon([(0, 0), (10, 10), (10, 0), (0, 10)])
    gdf = gpd.GeoDataFrame({"name": ["bowtie"]}, geometry=[bowtie], crs="EPSG:3310")
    path = tmp_path / "bowtie.geojson"
    gdf.to_file(path, driver="GeoJSON")

    errors = VectorFileValidator().validate(path)

    assert any("invalid geometries" in e.message for e in errors)


def test_table_validator_reports_each_bad_row():
    """Test missing, non-numeric and out-of-range coordinates are reported by row."""
    df = pd.DataFrame(
        {
            "longitude": [-120.0, "x", -200.0, -118.0],
            "latitude": [37.0, 36.0, 35.0, None],
        }
    )

    errors = TableValidator().validate(df)

    assert [(e.row, e.field) for e in errors] == [
        (1, "longitude"),
        (2, "longitude"),
        (3, "latitude"),
    ]


def test_table_validator_missing_columns(tmp_path):
    path = tmp_path / "camps.csv"
    path.write_text("name,lon,lat\nA,-120,37\n")

    errors = TableValidator().validate(path)

    assert len(errors) == 1
    assert errors[0].field == "columns"
    assert "longitude" in errors[0].message


def test_table_validator_accepts_custom_columns(tmp_path):
    path = tmp_path / "camps.csv"
    path.write_text("name,lon,lat\nA,-120,37\n")

    assert TableValidator("lon", "lat").validate(path) == []
