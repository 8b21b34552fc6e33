"""Output strategies for toolkit results."""

from spatialkit.outputs.base import OutputStrategy
from spatialkit.outputs.csv import (
    AttributesCSVOutput,
    DistanceMatrixCSVOutput,
    RelationCSVOutput,
)
from spatialkit.outputs.vector import VectorOutput

__all__ = [
    "OutputStrategy",
    "AttributesCSVOutput",
    "RelationCSVOutput",
    "DistanceMatrixCSVOutput",
    "VectorOutput",
]
