"""Geometry model: points and polygons tagged with a CRS.

Geometries are immutable. A Polygon stores its rings closed (first coordinate
repeated at the end), with the shell wound counter-clockwise and holes wound
clockwise; orientation is normalised on construction so downstream code can
rely on "interior on the left" for every ring.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from functools import cached_property

import numpy as np

from spatialkit.errors import InvalidGeometryError
from spatialkit.models.crs import CRS, get_crs

Coordinate = tuple[float, float]
Ring = tuple[Coordinate, ...]


class GeometryFormat(StrEnum):
    """Supported vector file formats."""

    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    GEOPACKAGE = "geopackage"

    @classmethod
    def from_path(cls, path) -> "GeometryFormat":
        suffix = str(path).lower().rsplit(".", 1)[-1]
        mapping = {
            "shp": cls.SHAPEFILE,
            "geojson": cls.GEOJSON,
            "json": cls.GEOJSON,
            "gpkg": cls.GEOPACKAGE,
        }
        if suffix not in mapping:
            msg = f"Unsupported vector file extension: .{suffix}"
            raise ValueError(msg)
        return mapping[suffix]

    @property
    def driver(self) -> str:
        """OGR driver name used when writing this format."""
        return {
            GeometryFormat.SHAPEFILE: "ESRI Shapefile",
            GeometryFormat.GEOJSON: "GeoJSON",
            GeometryFormat.GEOPACKAGE: "GPKG",
        }[self]


def ring_signed_area(coords: Sequence[Coordinate] | np.ndarray) -> float:
    """Signed shoelace area of a closed ring (positive when counter-clockwise)."""
    arr = np.asarray(coords, dtype=float)
    if len(arr) < 4:
        return 0.0
    x = arr[:-1, 0]
    y = arr[:-1, 1]
    x_next = arr[1:, 0]
    y_next = arr[1:, 1]
    return float(np.sum(x * y_next - x_next * y) / 2.0)


def _as_coordinate(value) -> Coordinate:
    try:
        x, y = value[0], value[1]
        coord = (float(x), float(y))
    except (TypeError, ValueError, IndexError) as e:
        msg = f"Invalid coordinate pair: {value!r}"
        raise InvalidGeometryError(msg) from e
    if not (math.isfinite(coord[0]) and math.isfinite(coord[1])):
        msg = f"Non-finite coordinate: {value!r}"
        raise InvalidGeometryError(msg)
    return coord


def _validate_ring(ring: Iterable, index: int) -> Ring:
    coords = tuple(_as_coordinate(c) for c in ring)
    label = "shell" if index == 0 else f"hole {index}"

    if not coords or coords[0] != coords[-1]:
        msg = f"Polygon {label} is not closed (first and last coordinates differ)"
        raise InvalidGeometryError(msg)

    distinct = set(coords[:-1])
    if len(distinct) < 3:
        msg = f"Polygon {label} has fewer than 3 distinct points ({len(distinct)} found)"
        raise InvalidGeometryError(msg)

    if ring_signed_area(coords) == 0.0:
        msg = f"Polygon {label} has zero area (all points collinear)"
        raise InvalidGeometryError(msg)

    return coords


@dataclass(frozen=True)
class Point:
    """A coordinate pair in a coordinate reference system."""

    x: float
    y: float
    crs: CRS

    geom_type = "Point"

    def __post_init__(self):
        x, y = _as_coordinate((self.x, self.y))
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "crs", get_crs(self.crs))

    @classmethod
    def from_xy(cls, x: float, y: float, crs: CRS | int | str) -> "Point":
        return cls(x, y, get_crs(crs))

    @property
    def coordinates(self) -> Coordinate:
        return (self.x, self.y)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.x, self.y)

    def vertices(self) -> np.ndarray:
        """All vertex coordinates as an (n, 2) array."""
        return np.array([[self.x, self.y]], dtype=float)


@dataclass(frozen=True)
class Polygon:
    """A shell ring followed by zero or more hole rings.

    Raises:
        InvalidGeometryError: If any ring is unclosed, has fewer than three
            distinct points, has zero area or non-finite coordinates
    """

    rings: tuple[Ring, ...]
    crs: CRS

    geom_type = "Polygon"

    def __post_init__(self):
        rings = tuple(self.rings)
        if not rings:
            msg = "Polygon requires at least one ring"
            raise InvalidGeometryError(msg)

        normalised = []
        for index, ring in enumerate(rings):
            coords = _validate_ring(ring, index)
            # Shell counter-clockwise, holes clockwise
            ccw = ring_signed_area(coords) > 0
            if ccw != (index == 0):
                coords = tuple(reversed(coords))
            normalised.append(coords)

        object.__setattr__(self, "rings", tuple(normalised))
        object.__setattr__(self, "crs", get_crs(self.crs))

    @classmethod
    def from_coordinates(
        cls,
        shell: Sequence,
        holes: Sequence[Sequence] = (),
        crs: CRS | int | str = 3310,
        close: bool = True,
    ) -> "Polygon":
        """Build a polygon from raw coordinate sequences.

        Args:
            shell: Outer ring coordinates
            holes: Hole ring coordinates
            crs: CRS instance or EPSG code
            close: Append the first coordinate to rings that are not closed
        """
        rings = []
        for ring in (shell, *holes):
            coords = [_as_coordinate(c) for c in ring]
            if close and coords and coords[0] != coords[-1]:
                coords.append(coords[0])
            rings.append(tuple(coords))
        return cls(tuple(rings), get_crs(crs))

    @property
    def shell(self) -> Ring:
        return self.rings[0]

    @property
    def holes(self) -> tuple[Ring, ...]:
        return self.rings[1:]

    @property
    def coordinates(self) -> tuple[Ring, ...]:
        return self.rings

    @cached_property
    def ring_arrays(self) -> tuple[np.ndarray, ...]:
        """Each ring as a closed (n, 2) float array."""
        return tuple(np.asarray(ring, dtype=float) for ring in self.rings)

    @cached_property
    def bounds(self) -> tuple[float, float, float, float]:
        shell = self.ring_arrays[0]
        return (
            float(shell[:, 0].min()),
            float(shell[:, 1].min()),
            float(shell[:, 0].max()),
            float(shell[:, 1].max()),
        )

    def vertices(self) -> np.ndarray:
        """All vertex coordinates (closing duplicates removed) as an (n, 2) array."""
        return np.vstack([ring[:-1] for ring in self.ring_arrays])

    def edges(self) -> np.ndarray:
        """All ring edges as an (n, 4) array of x1, y1, x2, y2."""
        return np.vstack([np.hstack([ring[:-1], ring[1:]]) for ring in self.ring_arrays])


Geometry = Point | Polygon
