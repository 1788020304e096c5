"""
Query analysis for docsift.
"""

from docsift.analysis.inspector import (
    ARRAY_OPERATORS,
    COMPARISON_OPERATORS,
    ELEMENT_OPERATORS,
    EVALUATION_OPERATORS,
    LOGICAL_OPERATORS,
    NEGATION_OPERATORS,
    SUPPORTED_OPERATORS,
    QueryInfo,
    has_negation_operators,
    inspect_query,
    query_depth,
)

__all__ = [
    "COMPARISON_OPERATORS",
    "ARRAY_OPERATORS",
    "ELEMENT_OPERATORS",
    "EVALUATION_OPERATORS",
    "LOGICAL_OPERATORS",
    "NEGATION_OPERATORS",
    "SUPPORTED_OPERATORS",
    "QueryInfo",
    "inspect_query",
    "query_depth",
    "has_negation_operators",
]
