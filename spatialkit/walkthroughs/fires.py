"""Fire perimeter walkthrough.

Measures wildfire perimeters, builds evacuation zones around the larger
fires and reports which campgrounds fall inside a zone and how far each
campground is from the nearest fire.
"""

import logging

import pandas as pd

from spatialkit.config import (
    DEFAULT_WALKTHROUGH_CONFIG,
    DebugConfig,
    ToolkitConfig,
    WalkthroughConfig,
)
from spatialkit.debug import save_debug_collection
from spatialkit.models.feature import FeatureCollection
from spatialkit.models.measurement import Unit
from spatialkit.spatial import add_area_column, buffer_collection, distance_matrix, within
from spatialkit.spatial.utils import ensure_crs
from spatialkit.tabular import where

logger = logging.getLogger(__name__)


class FirePerimeterWalkthrough:
    """Fire areas, evacuation zones and campground exposure.

    Steps:
    - Project fires and campgrounds into the planar CRS
    - Append ``area_acre`` to every fire
    - Keep fires with ``area_acre >= min_fire_acres``
    - Buffer kept fires by ``evacuation_buffer_m``
    - Relate campgrounds ``within`` the buffers
    - Measure campground to kept-fire distances
    """

    def __init__(
        self,
        inputs: dict[str, FeatureCollection],
        config: WalkthroughConfig = DEFAULT_WALKTHROUGH_CONFIG,
        toolkit: ToolkitConfig | None = None,
        debug: DebugConfig | None = None,
    ):
        """Initialize the walkthrough.

        Args:
            inputs: Must contain "fires" (polygons) and "campgrounds" (points)
            config: Walkthrough parameters (planar CRS, thresholds, buffer distance)
            toolkit: Toolkit configuration (buffer segments, parallelism)
            debug: Debug output configuration
        """
        self.fires = inputs["fires"]
        self.campgrounds = inputs["campgrounds"]
        self.config = config
        self.toolkit = toolkit
        self.debug = debug or DebugConfig()

    def run(self) -> dict[str, pd.DataFrame]:
        """Run the walkthrough.

        Returns:
            Dictionary with:
            - "fire_areas": one row per fire with area and threshold flag
            - "campground_exposure": nearest kept fire, distance and zone count
            - "evacuation_pairs": campground/fire pairs inside an evacuation zone
            - "distance_matrix": campground x kept-fire distances in metres
        """
        cfg = self.config
        name_column = cfg.name_column
        logger.info(
            f"Running fire perimeter walkthrough: {len(self.fires)} fires, "
            f"{len(self.campgrounds)} campgrounds"
        )

        fires = ensure_crs(self.fires, cfg.planar_crs)
        campgrounds = ensure_crs(self.campgrounds, cfg.planar_crs)
        save_debug_collection(fires, "fires_planar", "fires", self.debug)

        fires = add_area_column(fires, Unit.ACRE, "area")
        fires = fires.with_column("fire_index", range(len(fires)))
        kept = where(fires, "area_acre", ">=", cfg.min_fire_acres)
        logger.info(f"{len(kept)} of {len(fires)} fires are at least {cfg.min_fire_acres:g} acres")

        buffers = buffer_collection(kept, cfg.evacuation_buffer_m, config=self.toolkit)
        save_debug_collection(buffers, "evacuation_buffers", "fires", self.debug)

        zones = within(campgrounds, buffers, self.toolkit)
        distances = distance_matrix(campgrounds, kept, self.toolkit)

        kept_index = kept.column("fire_index")
        kept_names = kept.column(name_column)
        camp_names = campgrounds.column(name_column)

        fire_areas = fires.to_frame()
        fire_areas["meets_threshold"] = fire_areas["area_acre"] >= cfg.min_fire_acres

        exposure_rows = []
        for i, (j, dist) in enumerate(distances.nearest()):
            exposure_rows.append(
                {
                    "campground_index": i,
                    "campground": camp_names[i],
                    "nearest_fire_index": kept_index[j] if j is not None else None,
                    "nearest_fire": kept_names[j] if j is not None else None,
                    "distance_m": dist.value if dist is not None else None,
                    "distance_mi": dist.to(Unit.MILE).value if dist is not None else None,
                    "evacuation_zones": len(zones.related(i)),
                }
            )
        exposure = pd.DataFrame(
            exposure_rows,
            columns=[
                "campground_index",
                "campground",
                "nearest_fire_index",
                "nearest_fire",
                "distance_m",
                "distance_mi",
                "evacuation_zones",
            ],
        )

        pairs = pd.DataFrame(
            [
                {
                    "campground_index": i,
                    "campground": camp_names[i],
                    "fire_index": kept_index[j],
                    "fire": kept_names[j],
                    "distance_m": float(distances.values[i, j]),
                }
                for i, j in zones
            ],
            columns=["campground_index", "campground", "fire_index", "fire", "distance_m"],
        )

        matrix = distances.to_frame()
        matrix.columns = [f"fire_{k}" for k in kept_index]

        logger.info(f"{int((exposure['evacuation_zones'] > 0).sum())} campgrounds inside an evacuation zone")

        return {
            "fire_areas": fire_areas,
            "campground_exposure": exposure,
            "evacuation_pairs": pairs,
            "distance_matrix": matrix,
        }
