"""Wildfire walkthroughs built on the toolkit operations."""

from spatialkit.walkthroughs.fires import FirePerimeterWalkthrough
from spatialkit.walkthroughs.runner import WALKTHROUGHS, run_walkthrough
from spatialkit.walkthroughs.smoke import SmokePlumeWalkthrough

__all__ = [
    "WALKTHROUGHS",
    "run_walkthrough",
    "FirePerimeterWalkthrough",
    "SmokePlumeWalkthrough",
]
