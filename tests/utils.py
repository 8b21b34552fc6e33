import pandas as pd

from spatialkit.io import geometry_from_shapely


def to_spatialkit(geometries, crs=3310):
    """Convert single-part shapely geometries to spatialkit geometries."""
    return [geometry_from_shapely(g, crs)[0] for g in geometries]


def compare_dataframes(
    expected_df: pd.DataFrame,
    actual_df: pd.DataFrame,
    tolerance: dict[str, float],
    sort_by: str = "id",
) -> None:
    """Compare two result dataframes with appropriate tolerances.

    Args:
        expected_df: Reference output (e.g. computed with shapely or pyproj)
        actual_df: spatialkit output
        tolerance: Numerical comparison tolerances ("absolute" and "relative")
        sort_by: Key column used to align rows

    Raises:
        AssertionError: If dataframes don't match within tolerance
    """
    # Check same number of rows
    assert len(expected_df) == len(
        actual_df
    ), f"Row count mismatch: {len(expected_df)} vs {len(actual_df)}"

    # Check columns match
    assert set(expected_df.columns) == set(
        actual_df.columns
    ), f"Column mismatch: {set(expected_df.columns) ^ set(actual_df.columns)}"

    expected_sorted = expected_df.sort_values(sort_by).reset_index(drop=True)
    actual_sorted = actual_df.sort_values(sort_by).reset_index(drop=True)

    numerical_cols = expected_sorted.select_dtypes(include=["number"]).columns
    categorical_cols = expected_sorted.select_dtypes(exclude=["number"]).columns

    # Categorical and boolean columns must match exactly
    for col in categorical_cols:
        pd.testing.assert_series_equal(
            expected_sorted[col],
            actual_sorted[col],
            check_names=True,
            obj=f"Column '{col}'",
        )

    for col in numerical_cols:
        expected_values = expected_sorted[col].astype(float)
        actual_values = actual_sorted[col].astype(float)

        # Use absolute tolerance for values near zero, relative for larger values
        abs_diff = (expected_values - actual_values).abs()
        rel_diff = abs_diff / expected_values.abs().replace(0, 1)

        within_tolerance = (abs_diff <= tolerance["absolute"]) | (rel_diff <= tolerance["relative"])

        failures = ~within_tolerance
        if failures.any():
            failure_rows = expected_sorted[failures][[sort_by]].copy()
            failure_rows["Expected"] = expected_values[failures]
            failure_rows["Actual"] = actual_values[failures]
            failure_rows["AbsDiff"] = abs_diff[failures]
            failure_rows["RelDiff"] = rel_diff[failures]

            raise AssertionError(f"Column '{col}' values differ beyond tolerance:\n{failure_rows}")
