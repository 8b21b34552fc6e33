"""Domain models for the spatial toolkit."""

from spatialkit.models.crs import CRS, AlbersParameters, CRSKind, get_crs, supported_codes
from spatialkit.models.feature import Feature, FeatureCollection
from spatialkit.models.geometry import Geometry, GeometryFormat, Point, Polygon
from spatialkit.models.measurement import Quantity, Unit, convert
from spatialkit.models.relation import DistanceMatrix, SpatialRelation

__all__ = [
    "CRS",
    "AlbersParameters",
    "CRSKind",
    "get_crs",
    "supported_codes",
    "Point",
    "Polygon",
    "Geometry",
    "GeometryFormat",
    "Feature",
    "FeatureCollection",
    "Quantity",
    "Unit",
    "convert",
    "SpatialRelation",
    "DistanceMatrix",
]
