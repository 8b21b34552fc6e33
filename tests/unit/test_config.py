"""Unit tests for configuration."""

import pytest


def test_default_config_values():
    """Test default toolkit configuration values."""
    from spatialkit.config import DEFAULT_CONFIG, CRSPolicy, LoadPolicy

    assert DEFAULT_CONFIG.buffer_segments == 64
    assert DEFAULT_CONFIG.crs_policy == CRSPolicy.REJECT
    assert DEFAULT_CONFIG.load_policy == LoadPolicy.REJECT
    assert DEFAULT_CONFIG.parallel is False
    assert DEFAULT_CONFIG.planar_crs == 3310
    assert DEFAULT_CONFIG.geographic_crs == 4269


def test_physical_constants_are_exact():
    """Test unit conversion constants match their legal definitions."""
    from spatialkit.config import CONSTANTS

    assert CONSTANTS.SQUARE_METRES_PER_ACRE == 4046.8564224
    assert CONSTANTS.METRES_PER_MILE == 1609.344
    assert CONSTANTS.METRES_PER_FOOT == 0.3048


def test_physical_constants_are_frozen():
    """Test constants cannot be modified."""
    from dataclasses import FrozenInstanceError

    from spatialkit.config import CONSTANTS

    with pytest.raises(FrozenInstanceError):
        CONSTANTS.METRES_PER_MILE = 1600.0


def test_toolkit_config_env_override(monkeypatch):
    """Test SPATIALKIT_ environment variables override defaults."""
    from spatialkit.config import CRSPolicy, ToolkitConfig

    monkeypatch.setenv("SPATIALKIT_BUFFER_SEGMENTS", "128")
    monkeypatch.setenv("SPATIALKIT_CRS_POLICY", "reproject")

    config = ToolkitConfig()

    assert config.buffer_segments == 128
    assert config.crs_policy == CRSPolicy.REPROJECT


def test_toolkit_config_rejects_too_few_segments():
    """Test buffer_segments lower bound."""
    from pydantic import ValidationError

    from spatialkit.config import ToolkitConfig

    with pytest.raises(ValidationError):
        ToolkitConfig(buffer_segments=4)


def test_walkthrough_config_defaults_and_env(monkeypatch):
    """Test walkthrough defaults (5 mile evacuation buffer) and env override."""
    from spatialkit.config import WalkthroughConfig

    config = WalkthroughConfig()
    assert config.evacuation_buffer_m == pytest.approx(5 * 1609.344)
    assert config.smoke_density is None

    monkeypatch.setenv("WALKTHROUGH_MIN_FIRE_ACRES", "500")
    monkeypatch.setenv("WALKTHROUGH_SMOKE_DENSITY", "Heavy")
    config = WalkthroughConfig()
    assert config.min_fire_acres == 500
    assert config.smoke_density == "Heavy"


def test_walkthrough_config_rejects_empty_column_names():
    """Test column name validator."""
    from pydantic import ValidationError

    from spatialkit.config import WalkthroughConfig

    with pytest.raises(ValidationError):
        WalkthroughConfig(longitude_column="  ")


def test_debug_config_from_env(monkeypatch, tmp_path):
    """Test debug configuration is read from the environment."""
    from spatialkit.config import DebugConfig

    monkeypatch.setenv("DEBUG_OUTPUT", "true")
    monkeypatch.setenv("DEBUG_OUTPUT_DIR", str(tmp_path))

    config = DebugConfig.from_env()

    assert config.enabled is True
    assert config.output_dir == tmp_path


def test_debug_config_disabled_by_default(monkeypatch):
    """Test debug output is off unless requested."""
    from spatialkit.config import DebugConfig

    monkeypatch.delenv("DEBUG_OUTPUT", raising=False)

    assert DebugConfig.from_env().enabled is False
