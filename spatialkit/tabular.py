"""Tabular point loading and attribute filtering.

Rows of a delimited table become Point features; every column other than
the two coordinate columns is carried as an attribute.

Rows without usable coordinates follow one explicit policy:
- ``reject`` (default): the whole load fails with MissingCoordinateError
  naming the first bad row
- ``skip``: bad rows are dropped, logged and counted in the result
A missing coordinate *column* always fails, whatever the policy.
"""

import logging
import math
import operator
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from spatialkit.config import DEFAULT_CONFIG, LoadPolicy
from spatialkit.errors import MissingCoordinateError
from spatialkit.models.crs import CRS, get_crs
from spatialkit.models.feature import Feature, FeatureCollection
from spatialkit.models.geometry import Point
from spatialkit.validation.errors import ValidationError

logger = logging.getLogger(__name__)


class TableLoadResult(BaseModel):
    """Outcome of a tabular load.

    Attributes:
        features: Loaded point features, in row order
        skipped: Number of rows dropped under the skip policy
        issues: One ValidationError per dropped row
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    features: FeatureCollection
    skipped: int = Field(default=0, ge=0)
    issues: list[ValidationError] = Field(default_factory=list)


def clean_value(value: Any) -> Any:
    """Convert pandas/numpy scalars to plain Python values (NaN and NaT -> None)."""
    if isinstance(value, (list, tuple, dict)):
        return value
    if value is None or pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, "item"):
        return value.item()
    return value


def _coordinate(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _records(rows: pd.DataFrame | Sequence[Mapping[str, Any]]) -> tuple[list[str], list[dict]]:
    if isinstance(rows, pd.DataFrame):
        return [str(c) for c in rows.columns], rows.to_dict(orient="records")
    records = [dict(r) for r in rows]
    columns: dict[str, None] = {}
    for record in records:
        for name in record:
            columns.setdefault(str(name), None)
    return list(columns), records


def load_table(
    rows: pd.DataFrame | Sequence[Mapping[str, Any]],
    longitude_column: str,
    latitude_column: str,
    crs: CRS | int | str | None = None,
    policy: LoadPolicy | str | None = None,
) -> TableLoadResult:
    """Build point features from table rows.

    Args:
        rows: DataFrame or sequence of mappings
        longitude_column: Column holding x / longitude
        latitude_column: Column holding y / latitude
        crs: CRS of the coordinates (default: ToolkitConfig.geographic_crs)
        policy: ``reject`` or ``skip`` (default: ToolkitConfig.load_policy)

    Returns:
        TableLoadResult with the features and skip report

    Raises:
        MissingCoordinateError: If a coordinate column is absent, or a row has
            no usable coordinate under the reject policy
        UnsupportedCRSError: If the CRS is not registered
    """
    crs = get_crs(crs if crs is not None else DEFAULT_CONFIG.geographic_crs)
    policy = LoadPolicy(policy or DEFAULT_CONFIG.load_policy)
    columns, records = _records(rows)

    for column in (longitude_column, latitude_column):
        if column not in columns:
            msg = f"Coordinate column '{column}' not found (columns: {', '.join(columns)})"
            raise MissingCoordinateError(msg, column=column)

    features = []
    issues = []
    for index, record in enumerate(records):
        x = _coordinate(record.get(longitude_column))
        y = _coordinate(record.get(latitude_column))

        if x is None or y is None:
            column = longitude_column if x is None else latitude_column
            message = f"Row {index} has no usable value in '{column}': {record.get(column)!r}"
            if policy == LoadPolicy.REJECT:
                raise MissingCoordinateError(message, row=index, column=column)
            logger.warning(f"Skipping row: {message}")
            issues.append(ValidationError(message=message, field=column, row=index))
            continue

        attributes = {
            str(k): clean_value(v)
            for k, v in record.items()
            if k not in (longitude_column, latitude_column)
        }
        features.append(Feature(geometry=Point(x, y, crs), attributes=attributes))

    if issues:
        logger.warning(f"Skipped {len(issues)} of {len(records)} rows without coordinates")
    logger.info(f"Loaded {len(features)} point features in {crs}")

    return TableLoadResult(
        features=FeatureCollection(tuple(features), crs),
        skipped=len(issues),
        issues=issues,
    )


def from_table(
    rows: pd.DataFrame | Sequence[Mapping[str, Any]],
    longitude_column: str,
    latitude_column: str,
    crs: CRS | int | str | None = None,
    policy: LoadPolicy | str | None = None,
) -> FeatureCollection:
    """Build point features from table rows; see ``load_table`` for the policy."""
    return load_table(rows, longitude_column, latitude_column, crs, policy).features


def read_table(
    path: Path | str,
    longitude_column: str,
    latitude_column: str,
    crs: CRS | int | str | None = None,
    policy: LoadPolicy | str | None = None,
    **read_csv_kwargs,
) -> TableLoadResult:
    """Read a delimited file with pandas and load it as point features."""
    path = Path(path)
    logger.info(f"Reading table: {path}")
    df = pd.read_csv(path, **read_csv_kwargs)
    return load_table(df, longitude_column, latitude_column, crs, policy)


def filter_features(
    collection: FeatureCollection,
    predicate: Callable[[Mapping[str, Any]], bool],
) -> FeatureCollection:
    """Features whose attributes satisfy ``predicate``, in their original order."""
    kept = tuple(f for f in collection if predicate(f.attributes))
    logger.debug(f"Filter kept {len(kept)} of {len(collection)} features")
    return FeatureCollection(kept, collection.crs)


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}


def where(collection: FeatureCollection, column: str, op: str, value: Any) -> FeatureCollection:
    """Declarative filter, e.g. ``where(fires, "area_acre", ">=", 1000)``.

    Features missing the column (or holding None) never match.
    """
    if op not in _OPERATORS:
        msg = f"Unsupported operator '{op}' (expected one of {', '.join(_OPERATORS)})"
        raise ValueError(msg)
    compare = _OPERATORS[op]

    def predicate(attributes: Mapping[str, Any]) -> bool:
        current = attributes.get(column)
        if current is None:
            return False
        return bool(compare(current, value))

    return filter_features(collection, predicate)
