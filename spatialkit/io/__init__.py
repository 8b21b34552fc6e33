"""Vector file codec (geopandas) for feature collections."""

from spatialkit.io.vector import (
    from_geodataframe,
    geometry_from_shapely,
    geometry_to_shapely,
    read_vector,
    to_geodataframe,
    write_vector,
)

__all__ = [
    "read_vector",
    "write_vector",
    "from_geodataframe",
    "to_geodataframe",
    "geometry_from_shapely",
    "geometry_to_shapely",
]
