"""
Configuration for docsift.

================================================================================
COMPILER CONFIGURATION
================================================================================

Compilation is driven by a frozen CompilerConfig. Two presets are provided:

    DEFAULT_CONFIG
        Mixed-key mappings ({"$gt": 1, "name": "x"}) are compiled as operator
        expressions and the non-operator keys are dropped with a warning.

    STRICT_CONFIG
        Mixed-key mappings are rejected with a CompilationError, and queries
        are limited to a shallower nesting depth.

Callers that need something else build their own:

    >>> config = CompilerConfig(max_depth=16, mixed_keys="raise")
    >>> matcher = docsift.compile({"age": {"$gt": 28}}, config=config)

================================================================================
EXECUTION CONFIGURATION
================================================================================

ExecutionConfig sizes the thread pool used by docsift.execution.parallel_filter.
Matchers are stateless, so one compiled matcher is shared by every worker.
"""

import os
from dataclasses import dataclass
from typing import Optional

from docsift.constants import DEFAULT_MAX_DEPTH, MIN_CHUNK_SIZE

MIXED_KEY_POLICIES = ("ignore", "raise")


@dataclass(frozen=True)
class CompilerConfig:
    """
    Configuration for the query compiler.

    Example:
        CompilerConfig(
            max_depth=64,          # deepest accepted query nesting
            mixed_keys="ignore",   # drop non-$ keys next to operators
        )
    """

    # Maximum nesting of mappings/lists inside a query
    max_depth: int = DEFAULT_MAX_DEPTH

    # What to do with non-operator keys inside an operator expression
    mixed_keys: str = "ignore"

    # Description for logging
    description: str = "default"

    def __post_init__(self):
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.mixed_keys not in MIXED_KEY_POLICIES:
            raise ValueError(
                f"mixed_keys must be one of {MIXED_KEY_POLICIES}, "
                f"got {self.mixed_keys!r}"
            )


DEFAULT_CONFIG = CompilerConfig()

STRICT_CONFIG = CompilerConfig(
    max_depth=32,
    mixed_keys="raise",
    description="strict (mixed-key mappings rejected)",
)


@dataclass(frozen=True)
class ExecutionConfig:
    """
    Configuration for parallel filtering.

    Attributes:
        max_workers: Thread pool size (None -> min(32, cpu_count + 4))
        min_chunk_size: Smallest number of items handed to one worker
    """

    max_workers: Optional[int] = None
    min_chunk_size: int = MIN_CHUNK_SIZE

    def __post_init__(self):
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(
                f"max_workers must be at least 1, got {self.max_workers}"
            )
        if self.min_chunk_size < 1:
            raise ValueError(
                f"min_chunk_size must be at least 1, got {self.min_chunk_size}"
            )

    @property
    def worker_limit(self) -> int:
        """Effective worker count, using the ThreadPoolExecutor default."""
        if self.max_workers is not None:
            return self.max_workers
        return min(32, (os.cpu_count() or 1) + 4)


DEFAULT_EXECUTION_CONFIG = ExecutionConfig()
