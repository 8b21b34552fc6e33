"""Planar spatial operations on feature collections.

This package provides spatial operations including:
- Measurement (area, perimeter, distance, distance matrices, nearest)
- Buffer construction for points and polygons
- Predicate relations (intersects, within) between collections
- General utilities (CRS alignment, projected-CRS checks)

Commonly used exports:
- area / distance: Single-geometry measurements as unit-tagged Quantities
- add_area_column: Append an area attribute in a chosen unit
- distance_matrix: Pairwise distances between two collections
- buffer / buffer_collection: Dilate geometries by a positive distance
- intersects / within: Sparse relations between two collections
- ensure_crs: CRS validation and transformation
"""

# Measurement
from spatialkit.spatial.measure import (
    add_area_column,
    area,
    distance,
    distance_matrix,
    nearest,
    perimeter,
    total_area,
)

# Buffers
from spatialkit.spatial.buffer import buffer, buffer_collection

# Predicates
from spatialkit.spatial.predicates import (
    geometry_intersects,
    geometry_within,
    intersects,
    within,
)

# General utilities
from spatialkit.spatial.utils import align_crs, ensure_crs

__all__ = [
    "area",
    "perimeter",
    "distance",
    "distance_matrix",
    "nearest",
    "add_area_column",
    "total_area",
    "buffer",
    "buffer_collection",
    "intersects",
    "within",
    "geometry_intersects",
    "geometry_within",
    "ensure_crs",
    "align_crs",
]
