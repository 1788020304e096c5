"""
Query matching core for docsift.

- values: value kinds, ABSENT, deep_equals and ordering
- paths: dotted path resolution
- operators: the operator table
- query: query classification
- compiler: query -> matcher
"""

from docsift.matching.compiler import Matcher, QueryCompiler, compile_query
from docsift.matching.operators import OPERATORS, normalize_type
from docsift.matching.paths import compile_path
from docsift.matching.values import ABSENT, Kind, compare, deep_equals, kind_of

__all__ = [
    "ABSENT",
    "Kind",
    "Matcher",
    "OPERATORS",
    "QueryCompiler",
    "compare",
    "compile_path",
    "compile_query",
    "deep_equals",
    "kind_of",
    "normalize_type",
]
