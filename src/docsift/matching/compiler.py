"""
Query compiler for docsift.

================================================================================
DATA FLOW - QUERY TO MATCHER
================================================================================

A query is compiled once into a matcher: a plain function from a document to
a bool that can be stored and applied to any number of documents, from any
number of threads.

INPUT QUERY:
    {
        "city": "NYC",
        "user.profile.age": {"$gte": 18, "$lt": 65},
        "tags": {"$size": 2},
    }

STEP 1: inspect_query() measures the nesting depth. Queries deeper than
        config.max_depth are rejected before any recursion happens.

STEP 2: The query is classified (see docsift.matching.query):
    PATTERN   -> search document text
    OPERATOR  -> one matcher per "$"-entry from the operator table, ANDed
    SHAPE     -> one property matcher per key, ANDed, document must be a mapping
    LITERAL   -> deep_equals(document, literal)

STEP 3: Each shape key becomes a property matcher:

    "user.profile.age" -> resolver ["user", "profile", "age"]
                        + inner matcher for {"$gte": 18, "$lt": 65}

OUTPUT: one matcher composed of closures. Nothing is re-parsed per document.

================================================================================
IMPLICIT TRAVERSAL
================================================================================

When a path resolves to a sequence, the inner matcher is tried twice:

    1. against the whole sequence   ({"tags": {"$size": 2}}, {"tags": ["a", "b"]})
    2. against each element         ({"tags": "admin"})

The whole-sequence attempt comes first so that $size, $all and literal array
equality can fire on array fields. The element fallback is skipped when the
last path segment is numeric ("scores.0") or the sub-query checks $type, which
must see the container itself.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, List, Optional

from docsift.analysis.inspector import inspect_query
from docsift.config import DEFAULT_CONFIG, CompilerConfig
from docsift.constants import PATH_SEPARATOR
from docsift.exceptions import CompilationError
from docsift.matching.operators import Matcher, build_regex, get_builder
from docsift.matching.paths import (
    PathResolver,
    compile_path,
    is_numeric_segment,
    split_path,
)
from docsift.matching.query import (
    QueryForm,
    classify,
    has_type_check,
    is_operator_key,
    non_operator_keys,
)
from docsift.matching.values import deep_equals, pattern_matches

logger = logging.getLogger(__name__)

__all__ = ["Matcher", "QueryCompiler", "compile_query"]


def _all_of(matchers: List[Matcher]) -> Matcher:
    if len(matchers) == 1:
        return matchers[0]

    def _all(value: Any) -> bool:
        return all(matcher(value) for matcher in matchers)

    return _all


class QueryCompiler:
    """
    Compiles queries into matchers.

    The compiler itself is stateless apart from its configuration and can be
    shared; every compile() call builds an independent matcher.

    Example:
        >>> compiler = QueryCompiler()
        >>> adult = compiler.compile({"age": {"$gte": 18}})
        >>> adult({"age": 30}), adult({"age": 12}), adult({"name": "x"})
        (True, False, False)
    """

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def compile(self, query: Any) -> Matcher:
        """
        Compile a query into a matcher.

        Raises:
            CompilationError: unknown operator, excessive nesting, or (with
                mixed_keys="raise") a mapping mixing operators and fields
        """
        info = inspect_query(query)
        if info.depth > self.config.max_depth:
            raise CompilationError(
                f"Query nesting depth {info.depth} exceeds the maximum of "
                f"{self.config.max_depth}"
            )

        matcher = self._build(query, "")
        logger.debug(
            "Compiled query: operators=%s paths=%s depth=%d",
            sorted(info.operators),
            list(info.paths),
            info.depth,
        )
        return matcher

    # ------------------------------------------------------------------
    # Query forms
    # ------------------------------------------------------------------

    def _build(self, query: Any, path: str) -> Matcher:
        form = classify(query)

        if form is QueryForm.PATTERN:
            return self._build_pattern(query)
        if form is QueryForm.OPERATOR:
            return self._build_operator_expression(query, path)
        if form is QueryForm.SHAPE:
            return self._build_shape(query, path)
        return self._build_literal(query)

    def _build_pattern(self, pattern: Any) -> Matcher:
        def _pattern(value: Any) -> bool:
            return pattern_matches(pattern, value)

        return _pattern

    def _build_literal(self, literal: Any) -> Matcher:
        def _literal(value: Any) -> bool:
            return deep_equals(value, literal)

        return _literal

    def _build_operator_expression(self, expression: Mapping, path: str) -> Matcher:
        ignored = non_operator_keys(expression)
        if ignored:
            self._handle_mixed_keys(ignored, path)

        compile_nested = self._nested_compiler(path)
        matchers: List[Matcher] = []

        for name, param in expression.items():
            if not is_operator_key(name):
                continue
            builder = get_builder(name)
            if builder is None:
                raise CompilationError.unknown_operator(name, path)
            if name == "$regex" and "$options" in expression:
                matchers.append(build_regex(param, expression["$options"]))
            else:
                matchers.append(builder(param, compile_nested))

        return _all_of(matchers)

    def _build_shape(self, shape: Mapping, path: str) -> Matcher:
        matchers = [
            self._build_property(key, sub_query, path)
            for key, sub_query in shape.items()
        ]

        def _shape(value: Any) -> bool:
            return isinstance(value, Mapping) and all(
                matcher(value) for matcher in matchers
            )

        return _shape

    def _build_property(self, key: Any, sub_query: Any, path: str) -> Matcher:
        segments = split_path(key)
        resolve: PathResolver = compile_path(key)
        inner = self._build(sub_query, self._join(path, key))

        # $type must inspect the container, and numeric paths name one slot
        traverse = not is_numeric_segment(segments[-1]) and not has_type_check(
            sub_query
        )

        if not traverse:

            def _property(root: Any) -> bool:
                return inner(resolve(root))

            return _property

        def _traversing_property(root: Any) -> bool:
            actual = resolve(root)
            if isinstance(actual, (list, tuple)):
                # Whole sequence first ($size, $all, array literals),
                # then each element
                return inner(actual) or any(inner(item) for item in actual)
            return inner(actual)

        return _traversing_property

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _nested_compiler(self, path: str) -> Callable[[Any], Matcher]:
        def _compile_nested(query: Any) -> Matcher:
            return self._build(query, path)

        return _compile_nested

    def _handle_mixed_keys(self, keys: List[Any], path: str) -> None:
        where = path or "<root>"
        if self.config.mixed_keys == "raise":
            raise CompilationError(
                f"Operator expression at '{where}' mixes operators with "
                f"field keys: {keys}",
                path=path,
            )
        logger.warning(
            "Ignoring non-operator keys %s in operator expression at '%s'",
            keys,
            where,
        )

    @staticmethod
    def _join(path: str, key: Any) -> str:
        return f"{path}{PATH_SEPARATOR}{key}" if path else str(key)


def compile_query(query: Any, config: Optional[CompilerConfig] = None) -> Matcher:
    """
    Compile a query into a matcher.

    Args:
        query: Query value (literal, pattern, operator or shape expression)
        config: Compiler configuration (DEFAULT_CONFIG if omitted)

    Returns:
        A matcher: Callable[[document], bool]

    Raises:
        CompilationError: If the query cannot be compiled

    Example:
        >>> matcher = compile_query({"count": {"$mod": [5, 0]}})
        >>> matcher({"count": 15}), matcher({"count": 12})
        (True, False)
    """
    return QueryCompiler(config).compile(query)
