"""
Query inspector for docsift.

This module walks a query without compiling it and reports what it uses:
which operators, which document paths, and how deeply it nests. The compiler
runs it first to reject queries nested beyond the configured depth before any
recursion happens; callers can use it to explain or audit a query.

================================================================================
OPERATOR CATEGORIES
================================================================================

    COMPARISON (6)   $eq, $ne, $gt, $gte, $lt, $lte
    ARRAY (5)        $in, $nin, $all, $size, $elemMatch
    ELEMENT (2)      $exists, $type
    EVALUATION (3)   $mod, $regex, $options
    LOGICAL (4)      $and, $or, $nor, $not

    NEGATION         $ne, $nin, $not, $nor
        These match documents by what they do NOT contain, including
        documents where the field is missing altogether.

Only query positions are walked: shape values, the operand of $not and
$elemMatch, and the items of $and/$or/$nor. Operator parameters such as the
list given to $in are data and are never interpreted as queries.

================================================================================
USAGE
================================================================================

    >>> info = inspect_query({
    ...     "$and": [
    ...         {"age": {"$gte": 18}},
    ...         {"$or": [{"city": "NYC"}, {"user": {"profile.city": "SF"}}]},
    ...     ]
    ... })
    >>> sorted(info.operators)
    ['$and', '$gte', '$or']
    >>> info.paths
    ('age', 'city', 'user.profile.city')
    >>> info.depth
    4
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Set, Tuple

from docsift.constants import PATH_SEPARATOR
from docsift.matching.query import QueryForm, classify, is_operator_key
from docsift.matching.values import is_sequence

__all__ = [
    # Classification sets
    "COMPARISON_OPERATORS",
    "ARRAY_OPERATORS",
    "ELEMENT_OPERATORS",
    "EVALUATION_OPERATORS",
    "LOGICAL_OPERATORS",
    "NEGATION_OPERATORS",
    "SUPPORTED_OPERATORS",
    # Inspection
    "QueryInfo",
    "inspect_query",
    "query_depth",
    "has_negation_operators",
]

# =============================================================================
# OPERATOR CLASSIFICATION
# =============================================================================

COMPARISON_OPERATORS: frozenset[str] = frozenset(
    {"$eq", "$ne", "$gt", "$gte", "$lt", "$lte"}
)

ARRAY_OPERATORS: frozenset[str] = frozenset(
    {"$in", "$nin", "$all", "$size", "$elemMatch"}
)

ELEMENT_OPERATORS: frozenset[str] = frozenset({"$exists", "$type"})

EVALUATION_OPERATORS: frozenset[str] = frozenset({"$mod", "$regex", "$options"})

LOGICAL_OPERATORS: frozenset[str] = frozenset({"$and", "$or", "$nor", "$not"})

# Operators that create negation/exclusion filters
NEGATION_OPERATORS: frozenset[str] = frozenset({"$ne", "$nin", "$not", "$nor"})

SUPPORTED_OPERATORS: frozenset[str] = (
    COMPARISON_OPERATORS
    | ARRAY_OPERATORS
    | ELEMENT_OPERATORS
    | EVALUATION_OPERATORS
    | LOGICAL_OPERATORS
)

# Operators whose parameter is itself a query
QUERY_OPERATORS: frozenset[str] = frozenset({"$not", "$elemMatch"})

# Operators whose parameter is a list of queries
QUERY_LIST_OPERATORS: frozenset[str] = frozenset({"$and", "$or", "$nor"})


@dataclass(frozen=True)
class QueryInfo:
    """
    Summary of a query.

    Example:
        QueryInfo(
            operators=frozenset({"$gt"}),
            paths=("meta.score",),
            depth=3,                      # {"meta": {"score": {"$gt": 15}}}
            unknown_operators=frozenset(),
            ignored_keys=(),
            negated=False,
        )
    """

    operators: frozenset
    paths: Tuple[str, ...]
    depth: int
    unknown_operators: frozenset
    # Non-operator keys found inside operator expressions, as dotted paths
    ignored_keys: Tuple[str, ...]
    negated: bool

    @property
    def is_valid(self) -> bool:
        """True if every operator used is supported."""
        return not self.unknown_operators


def _join(prefix: str, key: Any) -> str:
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)


def inspect_query(query: Any) -> QueryInfo:
    """
    Walk a query and summarise it.

    Iterative, so arbitrarily deep queries are measured without recursion.

    Args:
        query: Any query value

    Returns:
        QueryInfo for the query
    """
    operators: Set[str] = set()
    unknown: Set[str] = set()
    paths: List[str] = []
    seen_paths: Set[str] = set()
    ignored: List[str] = []
    max_depth = 0

    # (query, depth of its parent mapping, dotted prefix)
    stack: List[Tuple[Any, int, str]] = [(query, 0, "")]

    while stack:
        node, depth, prefix = stack.pop()
        form = classify(node)

        if form is QueryForm.SHAPE:
            depth += 1
            max_depth = max(max_depth, depth)
            children = []
            for key, value in node.items():
                path = _join(prefix, key)
                # Nested shapes only contribute their leaves
                if classify(value) is not QueryForm.SHAPE and path not in seen_paths:
                    seen_paths.add(path)
                    paths.append(path)
                children.append((value, depth, path))
            stack.extend(reversed(children))

        elif form is QueryForm.OPERATOR:
            depth += 1
            max_depth = max(max_depth, depth)
            children = []
            for key, value in node.items():
                if not is_operator_key(key):
                    ignored.append(_join(prefix, key))
                    continue
                operators.add(key)
                if key not in SUPPORTED_OPERATORS:
                    unknown.add(key)
                elif key in QUERY_OPERATORS:
                    children.append((value, depth, prefix))
                elif key in QUERY_LIST_OPERATORS and is_sequence(value):
                    children.extend((item, depth, prefix) for item in value)
            stack.extend(reversed(children))

    return QueryInfo(
        operators=frozenset(operators),
        paths=tuple(paths),
        depth=max_depth,
        unknown_operators=frozenset(unknown),
        ignored_keys=tuple(ignored),
        negated=bool(operators & NEGATION_OPERATORS),
    )


def query_depth(query: Any) -> int:
    """
    Nesting depth of a query's mappings.

    Examples:
        >>> query_depth(30)
        0
        >>> query_depth({"age": 30})
        1
        >>> query_depth({"meta": {"score": {"$gt": 15}}})
        3
    """
    return inspect_query(query).depth


def has_negation_operators(query: Any) -> bool:
    """
    Check if query contains any negation operators.

    Examples:
        >>> has_negation_operators({"field": {"$in": [1, 2, 3]}})
        False
        >>> has_negation_operators({"field": {"$nin": [1, 2, 3]}})
        True
        >>> has_negation_operators({"$and": [{"field": {"$ne": 5}}]})
        True
    """
    return inspect_query(query).negated
