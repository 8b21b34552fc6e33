"""General spatial utilities.

This module provides common spatial utilities used across the toolkit:
- CRS validation and transformation
- CRS alignment between two collections (reject or reproject)
- Guards for operations that need planar coordinates
"""

import logging

from spatialkit.config import DEFAULT_CONFIG, CRSPolicy
from spatialkit.errors import CRSMismatchError, UnprojectedGeometryError
from spatialkit.models.crs import CRS, get_crs
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.geometry import Point, Polygon
from spatialkit.projection import reproject_collection

logger = logging.getLogger(__name__)


def ensure_crs(
    collection: FeatureCollection, target_crs: CRS | int | str | None = None
) -> FeatureCollection:
    """Ensure a collection is in the target CRS, transforming if necessary.

    Args:
        collection: Input collection
        target_crs: Target coordinate reference system
            (default: ToolkitConfig.planar_crs)

    Returns:
        Collection in target CRS (transformed if necessary, original if
        already correct)

    Raises:
        UnsupportedCRSError: If the target CRS is not registered
    """
    target = get_crs(target_crs if target_crs is not None else DEFAULT_CONFIG.planar_crs)
    if collection.crs != target:
        return reproject_collection(collection, target)

    return collection


def align_crs(
    left: FeatureCollection,
    right: FeatureCollection,
    policy: CRSPolicy | None = None,
) -> tuple[FeatureCollection, FeatureCollection]:
    """Return both collections in one CRS, or reject the combination.

    Args:
        left: Collection whose CRS wins
        right: Collection to check against ``left``
        policy: ``reject`` raises, ``reproject`` transforms ``right`` into
            ``left``'s CRS (default: ToolkitConfig.crs_policy)

    Raises:
        CRSMismatchError: If the CRSs differ and the policy is ``reject``
    """
    policy = CRSPolicy(policy or DEFAULT_CONFIG.crs_policy)
    if left.crs == right.crs:
        return left, right

    if policy == CRSPolicy.REJECT:
        msg = (
            f"CRS mismatch: {left.crs} vs {right.crs}. "
            f"Reproject one side first or use crs_policy='reproject'"
        )
        raise CRSMismatchError(msg)

    logger.info(f"Reprojecting {len(right)} features from {right.crs} to {left.crs}")
    return left, reproject_collection(right, left.crs)


def require_same_crs(a: Point | Polygon, b: Point | Polygon) -> None:
    """Raise CRSMismatchError unless two geometries share a CRS."""
    if a.crs != b.crs:
        msg = f"CRS mismatch: {a.crs} vs {b.crs}"
        raise CRSMismatchError(msg)


def require_projected(crs: CRS, operation: str) -> None:
    """Raise UnprojectedGeometryError for geographic coordinates.

    Lengths and areas computed from longitude/latitude degrees are not
    meaningful, so planar measurements refuse them outright.
    """
    if not crs.is_projected:
        msg = (
            f"{operation} requires projected coordinates, but data is in "
            f"{crs} ({crs.name}, {crs.units}). Reproject to a planar CRS such as EPSG:3310 first"
        )
        raise UnprojectedGeometryError(msg)
