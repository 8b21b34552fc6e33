"""Base output strategy interface for toolkit results."""

from pathlib import Path
from typing import Any, Protocol


class OutputStrategy(Protocol):
    """Protocol for output strategies that serialize toolkit results.

    Output strategies handle the transformation of collections, relations and
    distance matrices into files (CSV, GeoJSON, etc.). Operations return
    in-memory results and the caller decides when/where to write them.
    """

    def write(self, results: Any, output_path: Path) -> Path:
        """Write results to a file.

        Args:
            results: Collection, relation, matrix or DataFrame to serialize
            output_path: Path where output file should be written

        Returns:
            Path to the written output file

        Raises:
            IOError: If writing fails
            ValueError: If results cannot be serialized
        """
        ...
