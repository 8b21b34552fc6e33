"""Configuration and constants for the spatial toolkit.

This module defines the fixed unit conversion factors and the configurable
behaviour of the toolkit and of the wildfire walkthroughs.

Includes configuration for:
- Toolkit behaviour (ToolkitConfig with SPATIALKIT_ prefix)
- Walkthrough parameters (WalkthroughConfig with WALKTHROUGH_ prefix)
- Debug output (DebugConfig, read from DEBUG_OUTPUT / DEBUG_OUTPUT_DIR)

Configuration can be overridden via:
1. Environment variables (e.g., SPATIALKIT_BUFFER_SEGMENTS=128, WALKTHROUGH_MIN_FIRE_ACRES=500)
2. .env file in the current directory
3. Default values in code
"""

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class PhysicalConstants:
    """Unit conversion factors and the coordinate reference systems exercised.

    These are NOT configurable - they are exact definitions that should never
    vary.

    All attributes are immutable (frozen=True prevents modification).
    """

    # Coordinate reference systems
    CRS_NAD83: int = 4269
    CRS_CALIFORNIA_ALBERS: int = 3310
    CRS_CONUS_ALBERS: int = 5070

    # Unit conversion factors (exact by definition)
    SQUARE_METRES_PER_ACRE: float = 4046.8564224
    SQUARE_METRES_PER_HECTARE: float = 10_000.0
    SQUARE_METRES_PER_SQUARE_KILOMETRE: float = 1_000_000.0
    METRES_PER_KILOMETRE: float = 1_000.0
    METRES_PER_MILE: float = 1609.344
    METRES_PER_FOOT: float = 0.3048


# Module-level singleton for physical constants
CONSTANTS = PhysicalConstants()


class CRSPolicy(StrEnum):
    """What to do when two collections with different CRSs are combined."""

    REJECT = "reject"
    REPROJECT = "reproject"


class LoadPolicy(StrEnum):
    """What to do with table rows that lack usable coordinates."""

    REJECT = "reject"
    SKIP = "skip"


class ToolkitConfig(BaseSettings):
    """Behaviour of the geometry toolkit.

    Can be overridden via environment variables with SPATIALKIT_ prefix:
    - SPATIALKIT_BUFFER_SEGMENTS
    - SPATIALKIT_CRS_POLICY
    - SPATIALKIT_LOAD_POLICY
    - SPATIALKIT_PARALLEL
    - SPATIALKIT_MAX_WORKERS
    - SPATIALKIT_PARALLEL_MIN_ROWS

    Attributes:
        buffer_segments: Vertices used to approximate a full circle in buffers
        crs_policy: Reject or reproject when collection CRSs differ
        load_policy: Reject the whole table or skip rows without coordinates
        parallel: Enable process-pool evaluation of relation/distance matrices
        max_workers: Worker processes for matrices (None = 80% of cpu_count)
        parallel_min_rows: Below this many rows matrices always run sequentially
        projection_tolerance_deg: Round-trip tolerance guaranteed by reproject()
        planar_crs: Default planar CRS for measurements
        geographic_crs: Default geographic CRS for tabular loads
    """

    model_config = SettingsConfigDict(
        env_prefix="SPATIALKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    buffer_segments: int = Field(
        default=64, ge=8, description="Vertices used to approximate a full circle"
    )
    crs_policy: CRSPolicy = Field(
        default=CRSPolicy.REJECT, description="Reject or reproject on CRS mismatch"
    )
    load_policy: LoadPolicy = Field(
        default=LoadPolicy.REJECT, description="Reject or skip rows without coordinates"
    )
    parallel: bool = Field(default=False, description="Enable parallel matrix evaluation")
    max_workers: int | None = Field(
        default=None, description="Worker processes for matrices (None = auto-detect)"
    )
    parallel_min_rows: int = Field(
        default=200, ge=1, description="Minimum rows before matrices run in parallel"
    )
    projection_tolerance_deg: float = Field(
        default=1e-6, gt=0, description="Round-trip tolerance for reprojection (degrees)"
    )
    planar_crs: int = Field(
        default=CONSTANTS.CRS_CALIFORNIA_ALBERS, description="Default planar CRS (EPSG)"
    )
    geographic_crs: int = Field(
        default=CONSTANTS.CRS_NAD83, description="Default geographic CRS (EPSG)"
    )


DEFAULT_CONFIG = ToolkitConfig()


class WalkthroughConfig(BaseSettings):
    """Parameters of the wildfire walkthroughs.

    Can be overridden via environment variables with WALKTHROUGH_ prefix:
    - WALKTHROUGH_PLANAR_CRS
    - WALKTHROUGH_MIN_FIRE_ACRES
    - WALKTHROUGH_EVACUATION_BUFFER_M
    - WALKTHROUGH_SMOKE_DENSITY
    - WALKTHROUGH_LONGITUDE_COLUMN / WALKTHROUGH_LATITUDE_COLUMN

    Attributes:
        planar_crs: CRS every layer is projected into before measuring
        min_fire_acres: Fires smaller than this are dropped
        evacuation_buffer_m: Buffer distance around each kept fire perimeter
        smoke_density: Smoke plume density class to keep (None keeps all)
        density_column: Attribute holding the smoke density class
        name_column: Attribute used to label fires and campgrounds in outputs
        longitude_column: Longitude column of the campground table
        latitude_column: Latitude column of the campground table
    """

    model_config = SettingsConfigDict(
        env_prefix="WALKTHROUGH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    planar_crs: int = Field(
        default=CONSTANTS.CRS_CALIFORNIA_ALBERS, description="Planar CRS for measurements"
    )
    min_fire_acres: float = Field(default=0.0, ge=0, description="Minimum fire size (acres)")
    evacuation_buffer_m: float = Field(
        default=8046.72, gt=0, description="Evacuation buffer around fires (metres, 5 miles)"
    )
    smoke_density: str | None = Field(
        default=None, description="Smoke density class to keep (e.g. Heavy)"
    )
    density_column: str = Field(default="Density", description="Smoke density attribute")
    name_column: str = Field(default="name", description="Label attribute for outputs")
    longitude_column: str = Field(default="longitude", description="Longitude column")
    latitude_column: str = Field(default="latitude", description="Latitude column")

    @field_validator("density_column", "name_column", "longitude_column", "latitude_column")
    @classmethod
    def must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "Column names cannot be empty"
            raise ValueError(msg)
        return v


DEFAULT_WALKTHROUGH_CONFIG = WalkthroughConfig()


class DebugConfig:
    """Debug output configuration.

    WARNING: For local development only.
    - Adds disk I/O overhead
    - Consumes storage space
    """

    def __init__(
        self,
        enabled: bool = False,
        output_dir: Path = Path("/tmp/spatialkit-debug"),
    ):
        self.enabled = enabled
        self.output_dir = output_dir

    @classmethod
    def from_env(cls) -> "DebugConfig":
        return cls(
            enabled=os.environ.get("DEBUG_OUTPUT", "false").lower() == "true",
            output_dir=Path(os.environ.get("DEBUG_OUTPUT_DIR", "/tmp/spatialkit-debug")),
        )
