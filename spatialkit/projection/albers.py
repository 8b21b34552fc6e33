"""Albers conic equal-area projection on an ellipsoid.

Forward and inverse equations follow Snyder, "Map Projections: A Working
Manual" (USGS PP 1395), pp. 101-102. The inverse starts from the
three-term authalic latitude series, then refines latitude with the
fixed-point iteration of Snyder eq. 3-16 until it moves by less than
``INVERSE_TOLERANCE`` radians.

All functions are vectorised over numpy arrays of coordinates in degrees
(geographic) or metres (projected).
"""

from functools import lru_cache

import numpy as np

from spatialkit.models.crs import AlbersParameters

# Convergence threshold of the inverse latitude refinement (radians)
INVERSE_TOLERANCE = 1e-14
INVERSE_MAX_ITERATIONS = 15


def _q(sin_phi: np.ndarray, e: float) -> np.ndarray:
    """Snyder eq. 3-12 (the authalic latitude function)."""
    e2 = e * e
    es = e * sin_phi
    return (1 - e2) * (
        sin_phi / (1 - es * es) - (1 / (2 * e)) * np.log((1 - es) / (1 + es))
    )


def _m(phi: float, e: float) -> float:
    """Snyder eq. 14-15."""
    sin_phi = np.sin(phi)
    return float(np.cos(phi) / np.sqrt(1 - e * e * sin_phi * sin_phi))


class AlbersEqualArea:
    """Precomputed constants for one set of Albers parameters.

    Instances are read-only after construction and are shared through
    ``albers_projection()``.
    """

    def __init__(self, params: AlbersParameters):
        if params.standard_parallel_1 == params.standard_parallel_2:
            msg = "Albers projection requires two distinct standard parallels"
            raise ValueError(msg)

        self.params = params
        self.a = params.ellipsoid.semi_major_axis
        self.e2 = params.ellipsoid.eccentricity_squared
        self.e = float(np.sqrt(self.e2))
        self.lon0 = np.radians(params.central_meridian)

        phi1 = np.radians(params.standard_parallel_1)
        phi2 = np.radians(params.standard_parallel_2)
        phi0 = np.radians(params.latitude_of_origin)

        m1 = _m(phi1, self.e)
        m2 = _m(phi2, self.e)
        q0 = float(_q(np.sin(phi0), self.e))
        q1 = float(_q(np.sin(phi1), self.e))
        q2 = float(_q(np.sin(phi2), self.e))

        self.n = (m1 * m1 - m2 * m2) / (q2 - q1)
        self.C = m1 * m1 + self.n * q1
        self.rho0 = self.a * np.sqrt(self.C - self.n * q0) / self.n
        # q at the pole, used to normalise the authalic latitude
        self.qp = float(_q(np.array(1.0), self.e))

        e2, e4, e6 = self.e2, self.e2**2, self.e2**3
        self._series = (
            e2 / 3 + 31 * e4 / 180 + 517 * e6 / 5040,
            23 * e4 / 360 + 251 * e6 / 3780,
            761 * e6 / 45360,
        )

    def forward(self, lon, lat) -> tuple[np.ndarray, np.ndarray]:
        """Project longitude/latitude degrees to easting/northing metres."""
        lon = np.radians(np.asarray(lon, dtype=float))
        lat = np.radians(np.asarray(lat, dtype=float))

        q = _q(np.sin(lat), self.e)
        rho = self.a * np.sqrt(np.maximum(self.C - self.n * q, 0.0)) / self.n

        # Longitude difference wrapped to [-pi, pi)
        dlon = (lon - self.lon0 + np.pi) % (2 * np.pi) - np.pi
        theta = self.n * dlon

        x = rho * np.sin(theta) + self.params.false_easting
        y = self.rho0 - rho * np.cos(theta) + self.params.false_northing
        return x, y

    def inverse(self, x, y) -> tuple[np.ndarray, np.ndarray]:
        """Unproject easting/northing metres to longitude/latitude degrees."""
        x = np.asarray(x, dtype=float) - self.params.false_easting
        y = np.asarray(y, dtype=float) - self.params.false_northing

        dy = self.rho0 - y
        rho = np.hypot(x, dy)
        if self.n < 0:
            rho = -rho
            theta = np.arctan2(-x, -dy)
        else:
            theta = np.arctan2(x, dy)

        q = (self.C - (rho * self.n / self.a) ** 2) / self.n
        beta = np.arcsin(np.clip(q / self.qp, -1.0, 1.0))

        c2, c4, c6 = self._series
        lat = (
            beta
            + c2 * np.sin(2 * beta)
            + c4 * np.sin(4 * beta)
            + c6 * np.sin(6 * beta)
        )
        lat = self._refine_latitude(lat, q)
        lon = self.lon0 + theta / self.n
        lon = (lon + np.pi) % (2 * np.pi) - np.pi

        return np.degrees(lon), np.degrees(lat)

    def _refine_latitude(self, lat: np.ndarray, q: np.ndarray) -> np.ndarray:
        """Iterate Snyder eq. 3-16 so that q(lat) reproduces ``q``."""
        e, e2 = self.e, self.e2
        lat = np.array(lat, dtype=float)
        for _ in range(INVERSE_MAX_ITERATIONS):
            sin_phi = np.sin(lat)
            cos_phi = np.cos(lat)
            es = e * sin_phi
            one_minus = 1 - es * es
            # The correction is singular at the poles, where the series is exact enough
            movable = np.abs(cos_phi) > 1e-10
            with np.errstate(invalid="ignore", divide="ignore"):
                delta = (one_minus**2 / (2 * cos_phi)) * (
                    q / (1 - e2)
                    - sin_phi / one_minus
                    + (1 / (2 * e)) * np.log((1 - es) / (1 + es))
                )
            delta = np.where(movable, delta, 0.0)
            lat = lat + delta
            if np.all(np.abs(delta) < INVERSE_TOLERANCE):
                break
        return lat


@lru_cache(maxsize=None)
def albers_projection(params: AlbersParameters) -> AlbersEqualArea:
    """Shared, memoised projection constants for a parameter set."""
    return AlbersEqualArea(params)
