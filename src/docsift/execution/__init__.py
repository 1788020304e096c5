"""
Execution planning and parallel filtering for docsift.
"""

from docsift.execution.parallel import parallel_filter
from docsift.execution.planner import (
    ExecutionPlan,
    build_execution_plan,
    calculate_chunk_size,
)

__all__ = [
    "ExecutionPlan",
    "calculate_chunk_size",
    "build_execution_plan",
    # parallel.py exports
    "parallel_filter",
]
