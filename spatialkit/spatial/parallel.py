"""Chunked process-pool evaluation of row-wise matrix computations.

Each row of a relation or distance matrix is independent, so the left-hand
collection is split into contiguous chunks and evaluated in worker processes.
Results are concatenated in chunk order, so output is identical to the
sequential path.
"""

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import Any

from spatialkit.config import DEFAULT_CONFIG, ToolkitConfig

logger = logging.getLogger(__name__)


def _partition(items: Sequence, n_chunks: int) -> list[tuple[int, Sequence]]:
    """Split into at most ``n_chunks`` contiguous (offset, chunk) pieces."""
    if n_chunks <= 1 or len(items) <= 1:
        return [(0, items)]
    size = -(-len(items) // n_chunks)
    return [(start, items[start:start + size]) for start in range(0, len(items), size)]


def map_rows(
    worker: Callable[[Sequence, Sequence], list[Any]],
    left: Sequence,
    right: Sequence,
    config: ToolkitConfig | None = None,
) -> list[Any]:
    """Evaluate ``worker(left_chunk, right)`` over chunks of ``left``.

    ``worker`` must be a module-level function (picklable) returning one
    result per row of its chunk.

    Args:
        worker: Row evaluator
        left: Items whose rows are distributed
        right: Items every row is compared against
        config: Toolkit configuration (parallel flag, worker count, threshold)

    Returns:
        One result per item of ``left``, in order
    """
    config = config or DEFAULT_CONFIG

    if not config.parallel or len(left) < config.parallel_min_rows:
        return worker(left, right)

    max_workers = config.max_workers
    if max_workers is None:
        max_workers = max(1, int((os.cpu_count() or 4) * 0.8))

    chunks = _partition(left, max_workers)
    if len(chunks) <= 1:
        return worker(left, right)

    try:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(worker, chunk, right) for _, chunk in chunks]
            results = [f.result() for f in futures]
    except (NotImplementedError, PermissionError, OSError, BrokenProcessPool) as exc:
        logger.warning(f"Parallel evaluation unavailable ({exc}); falling back to sequential")
        return worker(left, right)

    logger.debug(f"Evaluated {len(left)} rows in {len(chunks)} chunks")
    return [row for chunk_result in results for row in chunk_result]
