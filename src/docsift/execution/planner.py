"""
Execution Planner for docsift.

================================================================================
CHUNKING MODEL
================================================================================

parallel_filter() splits a collection into contiguous chunks and matches each
chunk on a worker thread with one shared matcher. Matchers hold no state, so
no locking is needed; results are concatenated in chunk order, which keeps
the original item order.

   Given item_count, worker_limit and min_chunk_size:

     worker_count = min(worker_limit, ceil(item_count / min_chunk_size))
     chunk_size   = ceil(item_count / worker_count)
     chunks       = [0, chunk_size), [chunk_size, 2 * chunk_size), ...

   Small collections (item_count <= min_chunk_size) get a single chunk and
   run on the calling thread.

================================================================================
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from docsift.config import DEFAULT_EXECUTION_CONFIG, ExecutionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionPlan:
    """
    How a collection is split across workers.

    Example:
        ExecutionPlan(
            item_count=2500,
            worker_count=3,
            chunk_size=834,
            chunks=[(0, 834), (834, 1668), (1668, 2500)],
        )
    """

    item_count: int
    worker_count: int
    chunk_size: int
    chunks: List[Tuple[int, int]]

    @property
    def is_parallel(self) -> bool:
        return len(self.chunks) > 1


def calculate_chunk_size(
    item_count: int,
    config: ExecutionConfig = DEFAULT_EXECUTION_CONFIG,
) -> Tuple[int, int]:
    """
    Calculate worker count and chunk size for a collection.

    Args:
        item_count: Number of items to match
        config: Worker limits

    Returns:
        Tuple of (worker_count, chunk_size)

    Example:
        >>> calculate_chunk_size(2500, ExecutionConfig(max_workers=8, min_chunk_size=1000))
        (3, 834)
    """
    if item_count < 0:
        raise ValueError(f"item_count must not be negative, got {item_count}")

    if item_count == 0:
        return 1, 0

    # Never hand a worker less than min_chunk_size items
    useful_workers = math.ceil(item_count / config.min_chunk_size)
    worker_count = max(1, min(config.worker_limit, useful_workers))

    chunk_size = math.ceil(item_count / worker_count)
    return worker_count, chunk_size


def build_execution_plan(
    item_count: int,
    config: ExecutionConfig = DEFAULT_EXECUTION_CONFIG,
) -> ExecutionPlan:
    """Split item_count items into contiguous chunks, one per worker."""
    worker_count, chunk_size = calculate_chunk_size(item_count, config)

    chunks: List[Tuple[int, int]] = []
    if chunk_size:
        chunks = [
            (start, min(start + chunk_size, item_count))
            for start in range(0, item_count, chunk_size)
        ]

    plan = ExecutionPlan(
        item_count=item_count,
        worker_count=worker_count,
        chunk_size=chunk_size,
        chunks=chunks,
    )
    logger.debug(
        "Execution plan: %d items, %d workers, chunk size %d",
        item_count,
        worker_count,
        chunk_size,
    )
    return plan
