"""Unit tests for chunked row evaluation."""

from concurrent.futures.process import BrokenProcessPool
from unittest.mock import patch

from spatialkit.config import ToolkitConfig
from spatialkit.spatial.parallel import _partition, map_rows


def _row_sums(left, right):
    return [[a + b for b in right] for a in left]


def test_partition_covers_all_items_in_order():
    items = list(range(10))

    chunks = _partition(items, 3)

    assert [offset for offset, _ in chunks] == [0, 4, 8]
    assert [x for _, chunk in chunks for x in chunk] == items


def test_map_rows_sequential_below_threshold():
    """Test small inputs never start a process pool."""
    config = ToolkitConfig(parallel=True, parallel_min_rows=100)

    with patch("spatialkit.spatial.parallel.ProcessPoolExecutor") as pool:
        result = map_rows(_row_sums, [1, 2], [10, 20], config)

    pool.assert_not_called()
    assert result == [[11, 21], [12, 22]]


def test_map_rows_falls_back_when_pool_unavailable():
    """Test OSError from the pool falls back to sequential evaluation."""
    config = ToolkitConfig(parallel=True, max_workers=2, parallel_min_rows=1)

    with patch(
        "spatialkit.spatial.parallel.ProcessPoolExecutor", side_effect=OSError("no semaphores")
    ):
        result = map_rows(_row_sums, [1, 2, 3], [10], config)

    assert result == [[11], [12], [13]]


def test_map_rows_parallel_preserves_order():
    """Test chunked results come back in row order."""
    from spatialkit.models import Point
    from spatialkit.spatial.measure import _distance_rows

    config = ToolkitConfig(parallel=True, max_workers=2, parallel_min_rows=1)
    left = [Point(float(i), 0.0, 3310) for i in range(7)]
    right = [Point(0.0, 0.0, 3310)]

    result = map_rows(_distance_rows, left, right, config)

    assert result == [[float(i)] for i in range(7)]


def test_map_rows_falls_back_when_worker_dies():
    """Test a worker killed mid-run falls back to sequential evaluation."""
    config = ToolkitConfig(parallel=True, max_workers=2, parallel_min_rows=1)

    with patch("spatialkit.spatial.parallel.ProcessPoolExecutor") as pool:
        executor = pool.return_value.__enter__.return_value
        executor.submit.return_value.result.side_effect = BrokenProcessPool("worker died")
        result = map_rows(_row_sums, [1, 2, 3], [10], config)

    executor.submit.assert_called()
    assert result == [[11], [12], [13]]
