"""
Parallel filtering with a shared matcher.

The query is compiled once and the same matcher is called from every worker
thread. Results are identical to docsift.filter(), including order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from docsift.api import QueryOrMatcher, as_matcher
from docsift.config import DEFAULT_EXECUTION_CONFIG, ExecutionConfig
from docsift.execution.planner import build_execution_plan
from docsift.matching.compiler import Matcher

logger = logging.getLogger(__name__)


def _match_chunk(
    matcher: Matcher, items: Sequence[Any], bounds: Tuple[int, int]
) -> List[Any]:
    start, stop = bounds
    return [item for item in items[start:stop] if matcher(item)]


def parallel_filter(
    items: Iterable[Any],
    query: QueryOrMatcher,
    config: Optional[ExecutionConfig] = None,
) -> List[Any]:
    """
    Filter a collection on a thread pool.

    Args:
        items: Documents to filter (materialised into a list if needed)
        query: Query or compiled matcher
        config: Worker limits (DEFAULT_EXECUTION_CONFIG if omitted)

    Returns:
        Matching items in their original order

    Raises:
        CompilationError: If the query cannot be compiled

    Example:
        >>> parallel_filter(orders, {"status": "open", "total": {"$gte": 100}})
    """
    config = config or DEFAULT_EXECUTION_CONFIG
    matcher = as_matcher(query)
    items = items if isinstance(items, (list, tuple)) else list(items)

    plan = build_execution_plan(len(items), config)

    if not plan.is_parallel:
        return [item for item in items if matcher(item)]

    with ThreadPoolExecutor(max_workers=plan.worker_count) as executor:
        chunk_results = list(
            executor.map(lambda bounds: _match_chunk(matcher, items, bounds), plan.chunks)
        )

    result: List[Any] = []
    for chunk in chunk_results:
        result.extend(chunk)

    logger.debug(
        "Matched %d of %d items across %d chunks",
        len(result),
        len(items),
        len(plan.chunks),
    )
    return result
