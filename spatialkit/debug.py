"""Debug output helpers for inspecting intermediate layers.

WARNING: For local development and debugging only.
"""

import logging
from datetime import UTC, datetime

from spatialkit.config import DebugConfig
from spatialkit.io.vector import to_geodataframe
from spatialkit.models.feature import FeatureCollection

logger = logging.getLogger(__name__)


def save_debug_collection(
    collection: FeatureCollection,
    name: str,
    run_id: str,
    config: DebugConfig,
) -> None:
    """Save a FeatureCollection as a GeoPackage if debug output is enabled.

    Args:
        collection: Collection to save
        name: Descriptive name (e.g., "fires_planar", "evacuation_buffers")
        run_id: Run identifier for organizing output
        config: Debug configuration
    """
    if not config.enabled:
        return

    output_dir = config.output_dir / run_id
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(UTC).strftime("%H%M%S")
    output_path = output_dir / f"{timestamp}_{name}.gpkg"

    try:
        to_geodataframe(collection).to_file(output_path, driver="GPKG")
        logger.debug(f"Saved debug output: {output_path} ({len(collection)} features)")
    except Exception as e:
        logger.warning(f"Failed to save debug output {name}: {e}")
