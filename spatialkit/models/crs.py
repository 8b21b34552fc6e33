"""Coordinate reference system registry.

Only a handful of EPSG codes are supported: NAD83 geographic coordinates and
Albers equal-area projections defined on the same datum. Adding a code means
adding an entry to ``_REGISTRY``; no new code paths are required.
"""

from dataclasses import dataclass
from enum import StrEnum

from spatialkit.errors import UnsupportedCRSError


class CRSKind(StrEnum):
    """Whether coordinates are angles on the ellipsoid or planar lengths."""

    GEOGRAPHIC = "geographic"
    PROJECTED = "projected"


@dataclass(frozen=True)
class Ellipsoid:
    """Reference ellipsoid given by semi-major axis and inverse flattening."""

    name: str
    semi_major_axis: float
    inverse_flattening: float

    @property
    def flattening(self) -> float:
        return 1.0 / self.inverse_flattening

    @property
    def eccentricity_squared(self) -> float:
        f = self.flattening
        return 2 * f - f * f


GRS80 = Ellipsoid(name="GRS 1980", semi_major_axis=6_378_137.0, inverse_flattening=298.257222101)


@dataclass(frozen=True)
class AlbersParameters:
    """Parameters of an Albers conic equal-area projection (degrees, metres)."""

    standard_parallel_1: float
    standard_parallel_2: float
    latitude_of_origin: float
    central_meridian: float
    false_easting: float = 0.0
    false_northing: float = 0.0
    ellipsoid: Ellipsoid = GRS80


@dataclass(frozen=True)
class CRS:
    """A supported coordinate reference system.

    Attributes:
        code: EPSG code
        name: Human-readable name
        kind: Geographic (lon/lat degrees) or projected (metres)
        datum: Geodetic datum the coordinates refer to
        units: Coordinate units
        albers: Projection parameters (projected codes only)
    """

    code: int
    name: str
    kind: CRSKind
    datum: str = "NAD83"
    units: str = "degree"
    albers: AlbersParameters | None = None

    @property
    def is_geographic(self) -> bool:
        return self.kind == CRSKind.GEOGRAPHIC

    @property
    def is_projected(self) -> bool:
        return self.kind == CRSKind.PROJECTED

    @property
    def authority_string(self) -> str:
        """CRS as an ``EPSG:<code>`` string, as accepted by geopandas."""
        return f"EPSG:{self.code}"

    def __str__(self) -> str:
        return self.authority_string


_REGISTRY: dict[int, CRS] = {
    4269: CRS(code=4269, name="NAD83", kind=CRSKind.GEOGRAPHIC),
    3310: CRS(
        code=3310,
        name="NAD83 / California Albers",
        kind=CRSKind.PROJECTED,
        units="metre",
        albers=AlbersParameters(
            standard_parallel_1=34.0,
            standard_parallel_2=40.5,
            latitude_of_origin=0.0,
            central_meridian=-120.0,
            false_easting=0.0,
            false_northing=-4_000_000.0,
        ),
    ),
    5070: CRS(
        code=5070,
        name="NAD83 / Conus Albers",
        kind=CRSKind.PROJECTED,
        units="metre",
        albers=AlbersParameters(
            standard_parallel_1=29.5,
            standard_parallel_2=45.5,
            latitude_of_origin=23.0,
            central_meridian=-96.0,
        ),
    ),
}


def supported_codes() -> list[int]:
    """Return the EPSG codes with registered parameters."""
    return sorted(_REGISTRY)


def get_crs(code: "CRS | int | str") -> CRS:
    """Look up a CRS by EPSG code.

    Accepts a CRS instance, an integer code, or a string such as ``"3310"``
    or ``"EPSG:3310"``.

    Raises:
        UnsupportedCRSError: If the code is not registered
    """
    if isinstance(code, CRS):
        return code

    key: int | None = None
    if isinstance(code, bool):
        key = None
    elif isinstance(code, int):
        key = code
    elif isinstance(code, str):
        text = code.strip().upper()
        if text.startswith("EPSG:"):
            text = text[len("EPSG:"):]
        if text.isdigit():
            key = int(text)

    if key is None or key not in _REGISTRY:
        raise UnsupportedCRSError(code, supported_codes())

    return _REGISTRY[key]
