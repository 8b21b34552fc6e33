"""Pre-flight validation of input layers.

This module provides validators for:
1. Vector files - format, shapefile components, CRS, geometry types and validity
2. Point tables - coordinate columns present, rows with usable coordinates

Validators return a list of ValidationError reports instead of raising, so
the CLI can show every problem at once before running a walkthrough.
"""

from spatialkit.validation.errors import ValidationError
from spatialkit.validation.table import TableValidator
from spatialkit.validation.vector import VectorFileValidator

__all__ = [
    "ValidationError",
    "TableValidator",
    "VectorFileValidator",
]
