"""
Parquet storage layer for docsift.

Provides storage components for querying document collections kept on disk:

- Reader: streaming, query-aware Parquet reader with DataFrame construction
- Cache: deterministic query hashing and a caller-owned matcher cache
"""

from .cache import MatcherCache, hash_query
from .reader import ParquetReader

__all__ = [
    "hash_query",
    "MatcherCache",
    "ParquetReader",
]
