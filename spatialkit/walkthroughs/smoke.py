"""Smoke plume walkthrough.

Relates smoke plumes to the fires they overlap and reports, for every
campground, how many plumes cover it and the densest of them.
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
from spatialkit.spatial import add_area_column, intersects, within
from spatialkit.spatial.utils import ensure_crs
from spatialkit.tabular import filter_features

logger = logging.getLogger(__name__)

# Smoke density classes in increasing order of concentration
DENSITY_RANK = {"light": 1, "medium": 2, "heavy": 3}


def density_rank(value) -> int:
    """Rank of a density label (0 for unknown or missing labels)."""
    if value is None:
        return 0
    return DENSITY_RANK.get(str(value).strip().lower(), 0)


class SmokePlumeWalkthrough:
    """Smoke/fire overlap and campground smoke exposure."""

    def __init__(
        self,
        inputs: dict[str, FeatureCollection],
        config: WalkthroughConfig = DEFAULT_WALKTHROUGH_CONFIG,
        toolkit: ToolkitConfig | None = None,
        debug: DebugConfig | None = None,
    ):
        """Initialize the walkthrough.

        Args:
            inputs: Must contain "smoke" (polygons), "fires" (polygons) and
                "campgrounds" (points)
            config: Walkthrough parameters (planar CRS, density filter)
            toolkit: Toolkit configuration (parallelism)
            debug: Debug output configuration
        """
        self.smoke = inputs["smoke"]
        self.fires = inputs["fires"]
        self.campgrounds = inputs["campgrounds"]
        self.config = config
        self.toolkit = toolkit
        self.debug = debug or DebugConfig()

    def run(self) -> dict[str, pd.DataFrame]:
        """Run the walkthrough.

        Returns:
            Dictionary with:
            - "smoke_fire_pairs": smoke plume / fire pairs that intersect
            - "campground_smoke": per campground, plume count and densest plume
            - "smoke_areas": one row per kept plume with its area in acres
        """
        cfg = self.config
        density_column = cfg.density_column
        name_column = cfg.name_column

        smoke = ensure_crs(self.smoke, cfg.planar_crs)
        fires = ensure_crs(self.fires, cfg.planar_crs)
        campgrounds = ensure_crs(self.campgrounds, cfg.planar_crs)

        smoke = smoke.with_column("smoke_index", range(len(smoke)))
        if cfg.smoke_density is not None:
            wanted = cfg.smoke_density.strip().lower()
            smoke = filter_features(
                smoke,
                lambda attributes: str(attributes.get(density_column) or "").strip().lower()
                == wanted,
            )
            logger.info(f"Kept {len(smoke)} plumes with {density_column} = {cfg.smoke_density}")
        save_debug_collection(smoke, "smoke_planar", "smoke", self.debug)

        overlaps = intersects(smoke, fires, self.toolkit)
        covered = within(campgrounds, smoke, self.toolkit)

        smoke_index = smoke.column("smoke_index")
        densities = smoke.column(density_column)
        fire_names = fires.column(name_column)
        camp_names = campgrounds.column(name_column)

        pairs = pd.DataFrame(
            [
                {
                    "smoke_index": smoke_index[i],
                    "density": densities[i],
                    "fire_index": j,
                    "fire": fire_names[j],
                }
                for i, j in overlaps
            ],
            columns=["smoke_index", "density", "fire_index", "fire"],
        )

        camp_rows = []
        for i in range(len(campgrounds)):
            plumes = sorted(covered.related(i))
            densest = max(plumes, key=lambda k: density_rank(densities[k]), default=None)
            camp_rows.append(
                {
                    "campground_index": i,
                    "campground": camp_names[i],
                    "plumes": len(plumes),
                    "densest_smoke_index": smoke_index[densest] if densest is not None else None,
                    "densest_density": densities[densest] if densest is not None else None,
                }
            )
        campground_smoke = pd.DataFrame(
            camp_rows,
            columns=[
                "campground_index",
                "campground",
                "plumes",
                "densest_smoke_index",
                "densest_density",
            ],
        )

        smoke_areas = add_area_column(smoke, Unit.ACRE, "area").to_frame()

        logger.info(
            f"{overlaps.count()} plume/fire overlaps, "
            f"{int((campground_smoke['plumes'] > 0).sum())} campgrounds under smoke"
        )

        return {
            "smoke_fire_pairs": pairs,
            "campground_smoke": campground_smoke,
            "smoke_areas": smoke_areas,
        }
