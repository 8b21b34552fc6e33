"""Spatial relations and measurements for wildfire perimeters, campgrounds and smoke plumes."""

from spatialkit.models import (
    CRS,
    DistanceMatrix,
    Feature,
    FeatureCollection,
    Point,
    Polygon,
    Quantity,
    SpatialRelation,
    Unit,
    get_crs,
)
from spatialkit.projection import reproject, reproject_collection
from spatialkit.spatial import (
    add_area_column,
    area,
    buffer,
    buffer_collection,
    distance,
    distance_matrix,
    intersects,
    within,
)
from spatialkit.tabular import filter_features, from_table, load_table, where

__version__ = "0.1.0"

__all__ = [
    "CRS",
    "get_crs",
    "Point",
    "Polygon",
    "Feature",
    "FeatureCollection",
    "Quantity",
    "Unit",
    "SpatialRelation",
    "DistanceMatrix",
    "reproject",
    "reproject_collection",
    "area",
    "distance",
    "distance_matrix",
    "add_area_column",
    "buffer",
    "buffer_collection",
    "intersects",
    "within",
    "from_table",
    "load_table",
    "filter_features",
    "where",
]
