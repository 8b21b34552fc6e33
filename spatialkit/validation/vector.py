"""Vector file validation for fire perimeter, smoke plume and point layers."""

from pathlib import Path

import geopandas as gpd

from spatialkit.models.crs import supported_codes
from spatialkit.models.geometry import GeometryFormat
from spatialkit.validation.errors import ValidationError

POLYGON_TYPES = frozenset({"Polygon", "MultiPolygon"})
POINT_TYPES = frozenset({"Point", "MultiPoint"})


class VectorFileValidator:
    """Validates a vector layer before it is read into a FeatureCollection.

    Checks:
    - File format detection (.shp, .geojson/.json, .gpkg)
    - Shapefile: component files present (.shp, .shx, .dbf, .prj)
    - CRS defined and registered (EPSG 4269, 3310 or 5070)
    - Geometry type (Polygon/MultiPolygon and/or Point/MultiPoint)
    - No null or empty geometries
    - No invalid geometries
    """

    def __init__(self, allowed_types: frozenset[str] = POLYGON_TYPES | POINT_TYPES):
        self.allowed_types = frozenset(allowed_types)

    def validate(
        self, path: Path, geometry_format: GeometryFormat | None = None
    ) -> list[ValidationError]:
        """Validate a vector file.

        Args:
            path: Path to .shp, .geojson/.json or .gpkg file
            geometry_format: Format override (detected from the suffix when None)

        Returns:
            List of validation errors (empty if valid)
        """
        path = Path(path)
        errors = []

        if not path.exists():
            return [ValidationError(message=f"File not found: {path}", field="path")]

        if geometry_format is None:
            try:
                geometry_format = GeometryFormat.from_path(path)
            except ValueError as e:
                return [ValidationError(message=str(e), field="path")]

        if geometry_format == GeometryFormat.SHAPEFILE:
            errors.extend(self._validate_shapefile_components(path))
            if errors:
                return errors

        try:
            gdf = gpd.read_file(path)
        except Exception as e:
            return errors + [
                ValidationError(
                    message=f"Cannot read {geometry_format.value}: {e}",
                    field=geometry_format.value,
                )
            ]

        return errors + self._validate_geometry_data(gdf)

    def _validate_shapefile_components(self, shapefile_path: Path) -> list[ValidationError]:
        errors = []
        base_path = shapefile_path.with_suffix("")

        for ext in (".shp", ".shx", ".dbf", ".prj"):
            if not (base_path.with_suffix(ext)).exists():
                errors.append(
                    ValidationError(
                        message=f"Missing required shapefile component: {ext}",
                        field="shapefile",
                    )
                )

        return errors

    def _validate_geometry_data(self, gdf: gpd.GeoDataFrame) -> list[ValidationError]:
        """Checks shared by every format once the file has been read."""
        errors = []

        if gdf.crs is None:
            errors.append(ValidationError(message="Vector file has no defined CRS", field="crs"))
        else:
            epsg = gdf.crs.to_epsg()
            if epsg not in supported_codes():
                errors.append(
                    ValidationError(
                        message=f"Unsupported CRS {gdf.crs.to_string()} "
                        f"(supported EPSG codes: {', '.join(str(c) for c in supported_codes())})",
                        field="crs",
                    )
                )

        if gdf.geometry.name not in gdf.columns:
            errors.append(
                ValidationError(message="Vector file missing geometry column", field="geometry")
            )
            return errors

        present = gdf.geometry[gdf.geometry.notna()]
        geom_types = set(present.geom_type.unique())
        invalid_types = geom_types - self.allowed_types

        if invalid_types:
            errors.append(
                ValidationError(
                    message=f"Invalid geometry types found: {', '.join(sorted(invalid_types))}. "
                    f"Expected: {' or '.join(sorted(self.allowed_types))}",
                    field="geometry",
                )
            )

        null_count = int(gdf.geometry.isna().sum() + present.is_empty.sum())
        if null_count > 0:
            errors.append(
                ValidationError(message=f"Found {null_count} null or empty geometries", field="geometry")
            )

        invalid_count = int((~present.is_valid).sum())
        if invalid_count > 0:
            errors.append(
                ValidationError(
                    message=f"Found {invalid_count} invalid geometries (self-intersections, etc.)",
                    field="geometry",
                )
            )

        return errors
