"""
Tests for docsift.storage.cache module.

Covers:
- hash_query() determinism and sensitivity
- MatcherCache hits, misses and LRU eviction
- Concurrent use of one cache
"""

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

import pytest
from bson import ObjectId

import docsift
from docsift.config import STRICT_CONFIG
from docsift.schema import Types
from docsift.storage.cache import MatcherCache, hash_query


class TestHashQuery:
    """Test query hashing."""

    def test_key_order_does_not_matter(self):
        """Same query with different key order gives the same hash."""
        first = {"age": {"$gte": 18, "$lt": 65}, "city": "NYC"}
        second = {"city": "NYC", "age": {"$lt": 65, "$gte": 18}}

        assert hash_query(first) == hash_query(second)

    def test_hash_is_md5_hex(self):
        """Hashes are 32 hex characters."""
        value = hash_query({"a": 1})

        assert len(value) == 32
        int(value, 16)

    def test_list_order_matters(self):
        """Lists are ordered values."""
        assert hash_query({"tags": ["a", "b"]}) != hash_query({"tags": ["b", "a"]})

    @pytest.mark.parametrize(
        "first, second",
        [
            ({"d": date(2024, 1, 1)}, {"d": "2024-01-01"}),
            ({"d": date(2024, 1, 1)}, {"d": datetime(2024, 1, 1)}),
            ({"id": ObjectId("507f1f77bcf86cd799439011")}, {"id": "507f1f77bcf86cd799439011"}),
            ({"n": re.compile("^a")}, {"n": re.compile("^a", re.IGNORECASE)}),
            ({"n": re.compile("^a")}, {"n": "^a"}),
            ({"t": {"$type": Types.String}}, {"t": {"$type": "string"}}),
            ({"a": 1}, {"a": "1"}),
            ({"a": None}, {"a": {}}),
        ],
    )
    def test_distinct_values_hash_differently(self, first, second):
        """Values of different kinds never collide."""
        assert hash_query(first) != hash_query(second)

    def test_non_string_keys(self):
        """Mappings with non-string keys are hashed without error."""
        assert hash_query({1: "a", "1": "b"}) == hash_query({"1": "b", 1: "a"})


class TestMatcherCache:
    """Test MatcherCache."""

    def test_reuses_compiled_matchers(self):
        """A repeated query returns the same matcher object."""
        cache = MatcherCache()

        first = cache.get_or_compile({"age": {"$gt": 28}})
        second = cache.get_or_compile({"age": {"$gt": 28}})

        assert first is second
        assert (cache.hits, cache.misses) == (1, 1)
        assert {"age": {"$gt": 28}} in cache

    def test_cached_matcher_matches(self, people):
        """Cached matchers behave like freshly compiled ones."""
        cache = MatcherCache()
        matcher = cache.get_or_compile({"city": "NYC"})

        assert docsift.filter(people, matcher) == docsift.filter(people, {"city": "NYC"})

    def test_evicts_least_recently_used(self):
        """The oldest unused entry is dropped when full."""
        cache = MatcherCache(maxsize=2)
        cache.get_or_compile({"a": 1})
        cache.get_or_compile({"b": 1})
        cache.get_or_compile({"a": 1})
        cache.get_or_compile({"c": 1})

        assert len(cache) == 2
        assert {"a": 1} in cache
        assert {"b": 1} not in cache

    def test_failed_compilation_is_not_cached(self):
        """Queries that fail to compile leave the cache unchanged."""
        cache = MatcherCache()

        with pytest.raises(docsift.CompilationError):
            cache.get_or_compile({"a": {"$bogus": 1}})

        assert len(cache) == 0

    def test_uses_config(self):
        """The cache compiles with its own configuration."""
        cache = MatcherCache(config=STRICT_CONFIG)

        with pytest.raises(docsift.CompilationError):
            cache.get_or_compile({"a": {"$gt": 1, "b": 2}})

    def test_clear(self):
        """clear() drops matchers and counters."""
        cache = MatcherCache()
        cache.get_or_compile({"a": 1})
        cache.get_or_compile({"a": 1})

        cache.clear()

        assert len(cache) == 0
        assert (cache.hits, cache.misses) == (0, 0)

    def test_rejects_invalid_size(self):
        """maxsize must be positive."""
        with pytest.raises(ValueError):
            MatcherCache(maxsize=0)

    def test_concurrent_access(self):
        """Many threads can share one cache."""
        cache = MatcherCache(maxsize=8)
        queries = [{"n": {"$mod": [k, 0]}} for k in range(1, 5)] * 50

        with ThreadPoolExecutor(max_workers=8) as executor:
            matchers = list(executor.map(cache.get_or_compile, queries))

        assert len(cache) == 4
        assert cache.hits + cache.misses == len(queries)
        assert all(m({"n": 12}) for m in matchers)
