"""
Query classification.

Every query value falls into exactly one form:

    PATTERN     re.Pattern / bson Regex      -> searched against text values
    OPERATOR    mapping with a "$"-key       -> {"$gte": 18, "$lt": 65}
    SHAPE       mapping without "$"-keys     -> {"user.age": 30, "city": "NYC"}
    LITERAL     anything else                -> compared with deep_equals

A mapping with both kinds of keys ({"$gt": 1, "name": "x"}) is an OPERATOR
expression; its non-operator keys are not operators and are reported by
non_operator_keys().
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, List

from docsift.constants import OPERATOR_PREFIX
from docsift.matching.values import Kind, kind_of


class QueryForm(Enum):
    PATTERN = "pattern"
    OPERATOR = "operator"
    SHAPE = "shape"
    LITERAL = "literal"


def is_operator_key(key: Any) -> bool:
    return isinstance(key, str) and key.startswith(OPERATOR_PREFIX)


def is_operator_expression(query: Any) -> bool:
    """True if query is a mapping with at least one "$"-prefixed key."""
    return isinstance(query, Mapping) and any(is_operator_key(key) for key in query)


def non_operator_keys(query: Mapping) -> List[Any]:
    """Keys of an operator expression that do not name an operator."""
    return [key for key in query if not is_operator_key(key)]


def has_type_check(query: Any) -> bool:
    """True if query is an operator expression carrying "$type"."""
    return is_operator_expression(query) and "$type" in query


def classify(query: Any) -> QueryForm:
    if kind_of(query) is Kind.PATTERN:
        return QueryForm.PATTERN
    if isinstance(query, Mapping):
        if is_operator_expression(query):
            return QueryForm.OPERATOR
        return QueryForm.SHAPE
    return QueryForm.LITERAL
