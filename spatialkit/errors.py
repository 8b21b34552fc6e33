"""Exception taxonomy for the spatial toolkit.

All toolkit failures derive from SpatialToolkitError so callers can catch the
whole family in one place. Operations are deterministic, so none of these are
retried: the same input fails the same way every time.
"""


class SpatialToolkitError(Exception):
    """Base class for all toolkit errors."""


class InvalidGeometryError(SpatialToolkitError, ValueError):
    """A ring is unclosed, degenerate or carries non-finite coordinates."""


class UnsupportedCRSError(SpatialToolkitError, ValueError):
    """A CRS code has no registered projection parameters."""

    def __init__(self, code: object, supported: list[int] | None = None):
        self.code = code
        self.supported = supported or []
        msg = f"Unsupported CRS: {code!r}"
        if self.supported:
            msg += f" (supported EPSG codes: {', '.join(str(c) for c in self.supported)})"
        super().__init__(msg)


class UnprojectedGeometryError(SpatialToolkitError, ValueError):
    """A planar measurement was requested on geographic (lon/lat) data."""


class NonPositiveDistanceError(SpatialToolkitError, ValueError):
    """A buffer distance was zero or negative."""


class MissingCoordinateError(SpatialToolkitError, ValueError):
    """A table row lacks a usable longitude or latitude value."""

    def __init__(self, message: str, row: int | None = None, column: str | None = None):
        self.row = row
        self.column = column
        super().__init__(message)


class CRSMismatchError(SpatialToolkitError, ValueError):
    """Two geometries or collections were combined across different CRSs."""


class IncompatibleUnitError(SpatialToolkitError, ValueError):
    """A quantity was converted between an area unit and a length unit."""


class ProjectionAccuracyError(SpatialToolkitError):
    """A projection round trip drifted beyond the configured tolerance."""


class WalkthroughError(SpatialToolkitError):
    """A walkthrough pipeline could not be instantiated or executed."""
