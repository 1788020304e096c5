"""
Tests for the collection helpers exposed at package level.
"""

import pytest

import docsift
from docsift.api import as_matcher


class TestCompileAndTest:
    """Test compile() and test()/matches()."""

    def test_compile_returns_callable(self):
        matcher = docsift.compile({"age": {"$gt": 25}})
        assert matcher({"age": 30}) is True
        assert matcher({"age": 20}) is False

    def test_test_equals_compiled_matcher(self, people):
        query = {"tags": {"$in": ["admin"]}}
        matcher = docsift.compile(query)
        for person in people:
            assert docsift.test(person, query) is matcher(person)

    def test_matches_is_alias(self):
        assert docsift.matches is docsift.test

    def test_compile_with_config(self):
        with pytest.raises(docsift.CompilationError):
            docsift.compile({"a": {"$gt": 1, "b": 2}}, config=docsift.STRICT_CONFIG)

    def test_compiled_matcher_is_accepted_everywhere(self, people):
        adults = docsift.compile({"age": {"$gte": 30}})
        assert docsift.count(people, adults) == 2
        assert docsift.test(people[0], adults)

    def test_plain_function_is_accepted_as_matcher(self, people):
        assert docsift.count(people, lambda person: person["age"] > 29) == 2

    def test_type_is_compiled_as_literal(self):
        """Classes are callable, but they are values, not matchers."""
        matcher = as_matcher(str)
        assert matcher(str)
        assert not matcher("text")


class TestCollectionHelpers:
    """Test filter, find, any_match, all_match and count."""

    def test_filter_preserves_order(self, people):
        result = docsift.filter(people, {"age": {"$gt": 26}})
        assert [p["name"] for p in result] == ["Alice", "Charlie", "Diana"]

    def test_filter_equals_comprehension(self, people):
        query = {"$or": [{"city": "NYC"}, {"tags": {"$size": 1}}]}
        expected = [p for p in people if docsift.test(p, query)]
        assert docsift.filter(people, query) == expected

    def test_filter_accepts_iterators(self, people):
        result = docsift.filter(iter(people), {"city": "SF"})
        assert [p["name"] for p in result] == ["Bob"]

    def test_filter_empty(self):
        assert docsift.filter([], {"a": 1}) == []

    def test_find(self, people):
        assert docsift.find(people, {"city": "NYC"})["name"] == "Alice"
        assert docsift.find(people, {"city": "Paris"}) is None

    def test_find_with_default(self, people):
        sentinel = object()
        assert docsift.find(people, {"city": "Paris"}, default=sentinel) is sentinel

    def test_find_stops_at_first_match(self):
        seen = []

        def documents():
            for n in range(10):
                seen.append(n)
                yield {"n": n}

        assert docsift.find(documents(), {"n": {"$gte": 2}}) == {"n": 2}
        assert seen == [0, 1, 2]

    def test_any_and_all(self, people):
        assert docsift.any_match(people, {"city": "LA"})
        assert not docsift.any_match(people, {"city": "Paris"})
        assert docsift.all_match(people, {"age": {"$gte": 25}})
        assert not docsift.all_match(people, {"city": "NYC"})

    def test_quantifiers_on_empty_collection(self):
        assert not docsift.any_match([], {"a": 1})
        assert docsift.all_match([], {"a": 1})

    def test_count(self, people):
        assert docsift.count(people, {"tags": "user"}) == 3
        assert docsift.count(people, {"tags": {"$size": 1}}) == 1
        assert docsift.count([], {}) == 0

    def test_compilation_errors_propagate(self, people):
        with pytest.raises(docsift.CompilationError):
            docsift.filter(people, {"age": {"$between": [1, 2]}})


class TestPackage:
    """Test package-level exports."""

    def test_version(self):
        assert docsift.__version__ == "0.1.0"

    def test_exports(self):
        for name in docsift.__all__:
            assert hasattr(docsift, name)

    def test_errors_share_base(self):
        assert issubclass(docsift.CompilationError, docsift.DocsiftError)
