"""CSV output strategies.

Attribute tables are written one row per feature; geometry is not included
(use VectorOutput for that). Relations can be written as sparse pairs or as
a dense 0/1 matrix.
"""

import logging
from pathlib import Path

import pandas as pd

from spatialkit.models.feature import FeatureCollection
from spatialkit.models.measurement import Unit
from spatialkit.models.relation import DistanceMatrix, SpatialRelation

logger = logging.getLogger(__name__)


def _write_frame(df: pd.DataFrame, output_path: Path, index: bool = False) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=index)
    logger.info(f"Wrote {len(df)} rows to {output_path}")
    return output_path


class AttributesCSVOutput:
    """Writes feature attributes (or an already tabulated result) to CSV."""

    def __init__(self, include_geometry_type: bool = False):
        self.include_geometry_type = include_geometry_type

    def write(self, results: FeatureCollection | pd.DataFrame, output_path: Path) -> Path:
        if isinstance(results, FeatureCollection):
            df = results.to_frame(include_geometry_type=self.include_geometry_type)
        elif isinstance(results, pd.DataFrame):
            df = results
        else:
            msg = f"Cannot write {type(results).__name__} as an attribute table"
            raise ValueError(msg)
        return _write_frame(df, output_path)


class RelationCSVOutput:
    """Writes a SpatialRelation as ``source_index,related_index`` pairs or a dense matrix."""

    def __init__(self, dense: bool = False):
        self.dense = dense

    def write(self, results: SpatialRelation, output_path: Path) -> Path:
        if not isinstance(results, SpatialRelation):
            msg = f"Expected SpatialRelation, got {type(results).__name__}"
            raise ValueError(msg)
        if self.dense:
            return _write_frame(results.to_frame(), output_path, index=True)
        return _write_frame(results.to_pairs(), output_path)


class DistanceMatrixCSVOutput:
    """Writes a DistanceMatrix, optionally converted to another length unit."""

    def __init__(self, unit: Unit | str | None = None):
        self.unit = Unit(unit) if unit is not None else None

    def write(self, results: DistanceMatrix, output_path: Path) -> Path:
        if not isinstance(results, DistanceMatrix):
            msg = f"Expected DistanceMatrix, got {type(results).__name__}"
            raise ValueError(msg)
        matrix = results.to(self.unit) if self.unit is not None else results
        return _write_frame(matrix.to_frame(), output_path, index=True)
