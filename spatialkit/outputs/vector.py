"""Vector output strategy (shapefile, GeoJSON or GeoPackage)."""

from pathlib import Path

from spatialkit.io.vector import write_vector
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import GeometryFormat


class VectorOutput:
    """Writes a FeatureCollection with its geometry.

    The format follows the output suffix unless one is given explicitly.
    """

    def __init__(self, geometry_format: GeometryFormat | None = None):
        self.geometry_format = geometry_format

    def write(self, results: FeatureCollection, output_path: Path) -> Path:
        if not isinstance(results, FeatureCollection):
            msg = f"Expected FeatureCollection, got {type(results).__name__}"
            raise ValueError(msg)
        return write_vector(results, output_path, self.geometry_format)
