"""Validation of point tables before they are loaded as features."""

import math
from pathlib import Path

import pandas as pd

from spatialkit.validation.errors import ValidationError


class TableValidator:
    """Validates a point table (e.g. campgrounds) with longitude/latitude columns.

    Reports missing coordinate columns, then every row whose coordinates are
    missing, non-numeric or outside the geographic range.
    """

    def __init__(
        self,
        longitude_column: str = "longitude",
        latitude_column: str = "latitude",
        geographic: bool = True,
    ):
        self.longitude_column = longitude_column
        self.latitude_column = latitude_column
        self.geographic = geographic

    def required_fields(self) -> list[str]:
        return [self.longitude_column, self.latitude_column]

    def validate(self, data: pd.DataFrame | Path | str) -> list[ValidationError]:
        """Validate a table.

        Args:
            data: DataFrame, or path to a CSV file

        Returns:
            List of validation errors (empty if valid)
        """
        if not isinstance(data, pd.DataFrame):
            try:
                data = pd.read_csv(data)
            except Exception as e:
                return [ValidationError(message=f"Cannot read table: {e}", field="path")]

        missing_cols = [col for col in self.required_fields() if col not in data.columns]
        if missing_cols:
            return [
                ValidationError(
                    message=f"Missing required columns: {', '.join(missing_cols)}",
                    field="columns",
                )
            ]

        errors = []
        limits = {self.longitude_column: 180.0, self.latitude_column: 90.0}
        for column, limit in limits.items():
            values = pd.to_numeric(data[column], errors="coerce")
            for row, value in enumerate(values):
                if value is None or not math.isfinite(value):
                    errors.append(
                        ValidationError(
                            message=f"Row {row} has no usable value in '{column}'",
                            field=column,
                            row=row,
                        )
                    )
                elif self.geographic and abs(value) > limit:
                    errors.append(
                        ValidationError(
                            message=f"Row {row} has {column} {value} outside +/-{limit:g}",
                            field=column,
                            row=row,
                        )
                    )

        return sorted(errors, key=lambda e: (e.row, e.field))
