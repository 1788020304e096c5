"""
Collection helpers for docsift.

Every helper accepts either a query or an already compiled matcher (any
callable). Passing a matcher skips compilation, which matters when the same
query is applied to many collections:

    >>> adults = docsift.compile({"age": {"$gte": 18}})
    >>> docsift.count(people, adults)
    >>> docsift.filter(people, adults)
"""

from typing import Any, Iterable, List, Optional, TypeVar, Union

from docsift.config import CompilerConfig
from docsift.matching.compiler import Matcher, compile_query

T = TypeVar("T")

QueryOrMatcher = Union[Any, Matcher]


def compile(query: Any, config: Optional[CompilerConfig] = None) -> Matcher:
    """
    Compile a query into a reusable matcher.

    Example:
        >>> matcher = compile({"age": {"$gt": 25}})
        >>> matcher({"age": 30})
        True
        >>> matcher({"age": 20})
        False
    """
    return compile_query(query, config)


def as_matcher(query: QueryOrMatcher) -> Matcher:
    """Compile a query, or return it unchanged if it is already a matcher."""
    # Classes are callable but are $type tags, never matchers
    if callable(query) and not isinstance(query, type):
        return query
    return compile_query(query)


def test(document: Any, query: Any) -> bool:
    """
    Check if a single document matches a query.

    Example:
        >>> test({"name": "Alice", "age": 30}, {"age": 30})
        True
        >>> test({"name": "Bob", "age": 25}, {"age": {"$gte": 30}})
        False
    """
    return as_matcher(query)(document)


# Alias that reads better at call sites and is never collected by pytest
matches = test


def filter(items: Iterable[T], query: QueryOrMatcher) -> List[T]:
    """
    Return the items matching a query, in their original order.

    Example:
        >>> filter([{"a": 1}, {"a": 2}], {"a": {"$gt": 1}})
        [{'a': 2}]
    """
    matcher = as_matcher(query)
    return [item for item in items if matcher(item)]


def find(items: Iterable[T], query: QueryOrMatcher, default: Any = None) -> Any:
    """
    Return the first item matching a query, or ``default``.

    Example:
        >>> find([{"a": 1}, {"a": 2}], {"a": 2})
        {'a': 2}
        >>> find([{"a": 1}, {"a": 2}], {"a": 3}) is None
        True
    """
    matcher = as_matcher(query)
    for item in items:
        if matcher(item):
            return item
    return default


def any_match(items: Iterable[Any], query: QueryOrMatcher) -> bool:
    """True if at least one item matches."""
    matcher = as_matcher(query)
    return any(matcher(item) for item in items)


def all_match(items: Iterable[Any], query: QueryOrMatcher) -> bool:
    """True if every item matches (vacuously true for no items)."""
    matcher = as_matcher(query)
    return all(matcher(item) for item in items)


def count(items: Iterable[Any], query: QueryOrMatcher) -> int:
    """
    Count the items matching a query.

    Example:
        >>> count([{"a": 1}, {"a": 2}, {"a": 1}], {"a": 1})
        2
    """
    matcher = as_matcher(query)
    return sum(1 for item in items if matcher(item))
