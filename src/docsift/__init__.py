"""
docsift - MongoDB-style queries over in-memory documents.

Queries are compiled once into matchers (plain functions from a document to
a bool) and applied to any number of documents:

    >>> import docsift
    >>> people = [
    ...     {"name": "Alice", "age": 30, "city": "NYC", "tags": ["admin", "user"]},
    ...     {"name": "Bob", "age": 25, "city": "SF", "tags": ["user"]},
    ... ]
    >>> docsift.filter(people, {"city": "NYC"})
    [{'name': 'Alice', 'age': 30, 'city': 'NYC', 'tags': ['admin', 'user']}]
    >>> docsift.count(people, {"tags": {"$size": 1}})
    1
    >>> adult = docsift.compile({"age": {"$gte": 18}})
    >>> adult({"age": 30})
    True

Supported operators:

- Comparison: $eq, $ne, $gt, $gte, $lt, $lte
- Logical: $and, $or, $nor, $not
- Array: $in, $nin, $all, $elemMatch, $size
- Element: $exists, $type
- Evaluation: $mod, $regex (with $options)
"""

from docsift.api import (
    all_match,
    any_match,
    compile,
    count,
    filter,
    find,
    matches,
    test,
)
from docsift.config import (
    DEFAULT_CONFIG,
    STRICT_CONFIG,
    CompilerConfig,
    ExecutionConfig,
)
from docsift.exceptions import CompilationError, DocsiftError
from docsift.matching import ABSENT, Matcher, QueryCompiler, deep_equals

__version__ = "0.1.0"

__all__ = [
    # Collection helpers
    "compile",
    "test",
    "matches",
    "filter",
    "find",
    "any_match",
    "all_match",
    "count",
    # Compiler
    "Matcher",
    "QueryCompiler",
    "ABSENT",
    "deep_equals",
    # Configuration
    "CompilerConfig",
    "ExecutionConfig",
    "DEFAULT_CONFIG",
    "STRICT_CONFIG",
    # Errors
    "DocsiftError",
    "CompilationError",
]
