"""
Matcher caching for docsift.

This module provides two pieces:

1. Query Hashing (hash_query):
   - Creates deterministic MD5 hash from a query value
   - Normalizes datetimes to ISO format, ObjectIds to strings, patterns to
     their source and flags, type tags to their $type name
   - Recursively sorts dict keys for determinism
   - Same query always produces same hash

2. Compiled Matcher Cache (MatcherCache):
   - Maps query hashes to compiled matchers, least recently used evicted first
   - Owned by the caller; the compiler and its matchers hold no caches
   - Lock-protected, so one cache can serve many threads

Usage:
    # Hash a query
    query_hash = hash_query({"timestamp": {"$gte": start_date}})

    # Reuse compiled matchers across requests
    cache = MatcherCache(maxsize=256)
    matcher = cache.get_or_compile({"status": {"$in": ["active", "pending"]}})
    matcher({"status": "active"})
"""

import hashlib
import json
import re
import threading
from collections import OrderedDict
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Optional

from bson import ObjectId
from bson.regex import Regex

from docsift.config import CompilerConfig
from docsift.matching.compiler import Matcher, compile_query
from docsift.matching.operators import normalize_type
from docsift.schema.types import BaseType


def hash_query(query: Any) -> str:
    """
    Create deterministic hash of a query.

    Uses MD5 hash of canonicalized JSON. Same query values always produce the
    same hash, regardless of dict key order.

    Args:
        query: Query value

    Returns:
        Hex string hash (32 characters)

    Example:
        >>> hash_query({"a": 1, "b": 2}) == hash_query({"b": 2, "a": 1})
        True
    """

    def normalize_value(obj):
        """
        Recursively normalize query values for deterministic hashing.

        Every non-JSON value is tagged with its kind so that, for example,
        the string "2024-01-01" and date(2024, 1, 1) hash differently.
        """
        if isinstance(obj, Mapping):
            return {
                "$dict": [
                    [normalize_value(k), normalize_value(v)]
                    for k, v in sorted(obj.items(), key=lambda kv: repr(kv[0]))
                ]
            }
        elif isinstance(obj, (list, tuple)):
            return [normalize_value(v) for v in obj]
        elif isinstance(obj, date):
            return {"$date": obj.isoformat(), "$class": type(obj).__name__}
        elif isinstance(obj, ObjectId):
            return {"$oid": str(obj)}
        elif isinstance(obj, re.Pattern):
            return {"$regex": str(obj.pattern), "$flags": int(obj.flags)}
        elif isinstance(obj, Regex):
            return {"$regex": str(obj.pattern), "$flags": str(obj.flags)}
        elif isinstance(obj, Enum):
            return {"$enum": f"{type(obj).__qualname__}.{obj.name}"}
        elif isinstance(obj, (BaseType, type)):
            return {"$type": normalize_type(obj), "$repr": repr(obj)}
        elif obj is None or isinstance(obj, (bool, int, float, str)):
            return obj
        return {"$repr": repr(obj)}

    # Create deterministic JSON (sorted keys)
    json_str = json.dumps(
        {"query": normalize_value(query)}, sort_keys=True, separators=(",", ":")
    )

    # Hash it
    return hashlib.md5(json_str.encode("utf-8")).hexdigest()


class MatcherCache:
    """
    LRU cache of compiled matchers keyed by hash_query().

    Example:
        >>> cache = MatcherCache(maxsize=2)
        >>> first = cache.get_or_compile({"a": 1})
        >>> cache.get_or_compile({"a": 1}) is first
        True
        >>> len(cache)
        1
    """

    def __init__(self, maxsize: int = 128, config: Optional[CompilerConfig] = None):
        """
        Args:
            maxsize: Maximum number of matchers kept
            config: Compiler configuration used for every compile
        """
        if maxsize < 1:
            raise ValueError(f"maxsize must be at least 1, got {maxsize}")
        self.maxsize = maxsize
        self.config = config
        self._matchers: "OrderedDict[str, Matcher]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_compile(self, query: Any) -> Matcher:
        """
        Return the cached matcher for a query, compiling it on first use.

        Raises:
            CompilationError: If the query cannot be compiled (nothing is cached)
        """
        key = hash_query(query)

        with self._lock:
            matcher = self._matchers.get(key)
            if matcher is not None:
                self._matchers.move_to_end(key)
                self.hits += 1
                return matcher

        # Compile outside the lock; a concurrent miss compiles the same query twice
        matcher = compile_query(query, self.config)

        with self._lock:
            self.misses += 1
            existing = self._matchers.get(key)
            if existing is not None:
                self._matchers.move_to_end(key)
                return existing
            self._matchers[key] = matcher
            while len(self._matchers) > self.maxsize:
                self._matchers.popitem(last=False)
            return matcher

    def __contains__(self, query: Any) -> bool:
        key = hash_query(query)
        with self._lock:
            return key in self._matchers

    def __len__(self) -> int:
        with self._lock:
            return len(self._matchers)

    def clear(self) -> None:
        """Drop every cached matcher and reset the counters."""
        with self._lock:
            self._matchers.clear()
            self.hits = 0
            self.misses = 0
