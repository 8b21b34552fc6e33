"""Vector file reading and writing.

geopandas and shapely are used only as a codec here: files are read into
GeoDataFrames, converted to toolkit geometries, and never measured or
related with shapely.

Multi-part geometries are exploded into one feature per part when reading;
each part carries ``source_index`` (row in the file) and ``part_index``.
"""

import logging
from pathlib import Path

import geopandas as gpd
from shapely import geometry as sg

from spatialkit.errors import InvalidGeometryError, UnsupportedCRSError
from spatialkit.models.crs import CRS, get_crs, supported_codes
from spatialkit.models.feature import Feature, FeatureCollection
from spatialkit.models.geometry import GeometryFormat, Point, Polygon
from spatialkit.tabular import clean_value

logger = logging.getLogger(__name__)


def geometry_from_shapely(geom, crs: CRS | int | str) -> list[Point | Polygon]:
    """Convert a shapely geometry to toolkit geometries (one per part).

    Raises:
        InvalidGeometryError: For empty geometries or unsupported types
    """
    crs = get_crs(crs)
    if geom is None or geom.is_empty:
        msg = "Empty or null geometry"
        raise InvalidGeometryError(msg)

    if isinstance(geom, sg.Point):
        return [Point(float(geom.x), float(geom.y), crs)]
    if isinstance(geom, sg.Polygon):
        return [
            Polygon.from_coordinates(
                [c[:2] for c in geom.exterior.coords],
                [[c[:2] for c in ring.coords] for ring in geom.interiors],
                crs=crs,
            )
        ]
    if isinstance(geom, (sg.MultiPoint, sg.MultiPolygon)):
        parts = []
        for part in geom.geoms:
            parts.extend(geometry_from_shapely(part, crs))
        return parts

    msg = f"Unsupported geometry type: {geom.geom_type}"
    raise InvalidGeometryError(msg)


def geometry_to_shapely(geometry: Point | Polygon):
    """Convert a toolkit geometry to its shapely equivalent."""
    if isinstance(geometry, Point):
        return sg.Point(geometry.x, geometry.y)
    return sg.Polygon(geometry.shell, geometry.holes)


def _collection_crs(gdf: gpd.GeoDataFrame) -> CRS:
    if gdf.crs is None:
        raise UnsupportedCRSError(None, supported_codes())
    epsg = gdf.crs.to_epsg()
    if epsg is None:
        raise UnsupportedCRSError(gdf.crs.to_string(), supported_codes())
    return get_crs(epsg)


def from_geodataframe(gdf: gpd.GeoDataFrame, explode: bool = True) -> FeatureCollection:
    """Convert a GeoDataFrame to a FeatureCollection.

    Raises:
        UnsupportedCRSError: If the frame's CRS is missing or unregistered
        InvalidGeometryError: For null geometries, or multi-part geometries
            when ``explode`` is False
    """
    crs = _collection_crs(gdf)
    geometry_column = gdf.geometry.name
    attribute_columns = [c for c in gdf.columns if c != geometry_column]

    features = []
    for source_index, (geom, record) in enumerate(
        zip(gdf.geometry, gdf[attribute_columns].to_dict(orient="records"))
    ):
        try:
            parts = geometry_from_shapely(geom, crs)
        except InvalidGeometryError as e:
            msg = f"Row {source_index}: {e}"
            raise InvalidGeometryError(msg) from e

        attributes = {str(k): clean_value(v) for k, v in record.items()}
        if len(parts) == 1 and not geom.geom_type.startswith("Multi"):
            features.append(Feature(geometry=parts[0], attributes=attributes))
            continue

        if not explode:
            msg = f"Row {source_index} is a {geom.geom_type}; read with explode=True"
            raise InvalidGeometryError(msg)
        for part_index, part in enumerate(parts):
            features.append(
                Feature(
                    geometry=part,
                    attributes={
                        **attributes,
                        "source_index": source_index,
                        "part_index": part_index,
                    },
                )
            )

    return FeatureCollection(tuple(features), crs)


def to_geodataframe(collection: FeatureCollection) -> gpd.GeoDataFrame:
    """Convert a FeatureCollection to a GeoDataFrame in the same CRS."""
    return gpd.GeoDataFrame(
        collection.to_frame(),
        geometry=[geometry_to_shapely(g) for g in collection.geometries],
        crs=collection.crs.authority_string,
    )


def read_vector(path: Path | str, explode: bool = True) -> FeatureCollection:
    """Read a shapefile, GeoJSON or GeoPackage into a FeatureCollection.

    Args:
        path: Path to .shp, .geojson/.json or .gpkg file
        explode: Split multi-part geometries into one feature per part

    Raises:
        UnsupportedCRSError: If the file's CRS is missing or unregistered
        InvalidGeometryError: If a geometry cannot be represented
    """
    path = Path(path)
    geometry_format = GeometryFormat.from_path(path)
    logger.info(f"Reading {geometry_format.value}: {path}")

    gdf = gpd.read_file(path)
    collection = from_geodataframe(gdf, explode=explode)

    logger.info(f"Read {len(collection)} features ({len(gdf)} rows) in {collection.crs}")
    return collection


def write_vector(
    collection: FeatureCollection,
    path: Path | str,
    geometry_format: GeometryFormat | None = None,
) -> Path:
    """Write a FeatureCollection to .shp, .geojson or .gpkg.

    Returns:
        Path to the written file
    """
    path = Path(path)
    geometry_format = geometry_format or GeometryFormat.from_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    gdf = to_geodataframe(collection)
    gdf.to_file(path, driver=geometry_format.driver)
    logger.info(f"Wrote {len(gdf)} features to {path}")
    return path
