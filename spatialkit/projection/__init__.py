"""Coordinate reference system transforms.

Exports:
- reproject: Transform a single geometry to another CRS
- reproject_collection: Transform every feature of a collection
- transform_coordinates: Vectorised coordinate transform
- check_round_trip: Verify a projection round trip against the configured tolerance
- AlbersEqualArea / albers_projection: Projection equations and memoised constants
"""

from spatialkit.projection.albers import AlbersEqualArea, albers_projection
from spatialkit.projection.transform import (
    check_round_trip,
    reproject,
    reproject_collection,
    transform_coordinates,
)

__all__ = [
    "check_round_trip",
    "reproject",
    "reproject_collection",
    "transform_coordinates",
    "AlbersEqualArea",
    "albers_projection",
]
