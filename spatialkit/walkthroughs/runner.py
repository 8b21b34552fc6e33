"""Walkthrough execution

This module provides a runner for the registered walkthroughs.
"""

import logging

import pandas as pd

from spatialkit.config import DEFAULT_WALKTHROUGH_CONFIG, DebugConfig, ToolkitConfig, WalkthroughConfig
from spatialkit.errors import WalkthroughError
from spatialkit.models.feature import FeatureCollection
from spatialkit.walkthroughs.fires import FirePerimeterWalkthrough
from spatialkit.walkthroughs.smoke import SmokePlumeWalkthrough

logger = logging.getLogger(__name__)


WALKTHROUGHS: dict[str, type] = {
    "fires": FirePerimeterWalkthrough,
    "smoke": SmokePlumeWalkthrough,
}


def run_walkthrough(
    name: str,
    inputs: dict[str, FeatureCollection],
    config: WalkthroughConfig = DEFAULT_WALKTHROUGH_CONFIG,
    toolkit: ToolkitConfig | None = None,
    debug: DebugConfig | None = None,
) -> dict[str, pd.DataFrame]:
    """Run a walkthrough and return its result tables.

    Args:
        name: Walkthrough identifier ("fires" or "smoke")
        inputs: Named input layers, e.g. {"fires": ..., "campgrounds": ...}
        config: Walkthrough parameters
        toolkit: Toolkit configuration
        debug: Debug output configuration

    Returns:
        Dictionary of result DataFrames keyed by table name

    Raises:
        KeyError: If the walkthrough is not registered
        WalkthroughError: If the walkthrough cannot be instantiated, fails,
            or returns something other than a dict of DataFrames
    """
    logger.info(f"Running walkthrough: {name}")

    walkthrough_class = WALKTHROUGHS.get(name)
    if walkthrough_class is None:
        msg = f"Walkthrough {name} not supported (expected one of: {', '.join(WALKTHROUGHS)})"
        raise KeyError(msg)

    logger.info(f"Instantiating {walkthrough_class.__name__}")
    try:
        walkthrough = walkthrough_class(inputs, config, toolkit, debug)
    except Exception as e:
        logger.error(f"Walkthrough instantiation failed: {e}")
        msg = f"Failed to instantiate walkthrough '{name}'"
        raise WalkthroughError(msg) from e

    logger.info(f"Executing {name}.run()")
    try:
        tables = walkthrough.run()
    except Exception as e:
        logger.error(f"Walkthrough execution failed: {e}")
        msg = f"Walkthrough '{name}' execution failed"
        raise WalkthroughError(msg) from e

    if not isinstance(tables, dict):
        msg = f"Walkthrough '{name}'.run() must return a dict, got {type(tables).__name__}"
        raise WalkthroughError(msg)

    for key, value in tables.items():
        if not isinstance(value, pd.DataFrame):
            msg = (
                f"Walkthrough '{name}'.run() returned invalid value for key '{key}': "
                f"expected DataFrame, got {type(value).__name__}"
            )
            raise WalkthroughError(msg)

    logger.info(f"Walkthrough returned {len(tables)} table(s): {list(tables.keys())}")

    return tables
