"""
Operator table for docsift.

Each operator name maps to a builder ``(param, compile_nested) -> Matcher``.
Builders run once, at compile time; the matchers they return run once per
document and must never raise. A document value that an operator cannot
handle simply does not match.

``compile_nested`` compiles a sub-query in the caller's context. Only the
operators that take queries as parameters ($not, $elemMatch, $and, $or, $nor)
use it.

Categories:

- **Comparison**: $eq, $ne, $gt, $gte, $lt, $lte
- **Array**: $in, $nin, $all, $size, $elemMatch
- **Element**: $exists, $type
- **Evaluation**: $mod, $regex, $options
- **Logical**: $and, $or, $nor, $not
"""

import logging
import re
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from bson import ObjectId as BsonObjectId

from docsift.matching.values import (
    ABSENT,
    Kind,
    NUMERIC_KINDS,
    compare,
    deep_equals,
    is_integer,
    is_sequence,
    kind_of,
    to_pattern,
)
from docsift.schema.types import BaseType

logger = logging.getLogger(__name__)

Matcher = Callable[[Any], bool]
CompileNested = Callable[[Any], Matcher]
OperatorBuilder = Callable[[Any, CompileNested], Matcher]


def _never(value: Any) -> bool:
    return False


def _always(value: Any) -> bool:
    return True


# =============================================================================
# COMPARISON
# =============================================================================


def equals(value: Any, param: Any) -> bool:
    return deep_equals(value, param)


def not_equals(value: Any, param: Any) -> bool:
    return not deep_equals(value, param)


def greater_than(value: Any, param: Any) -> bool:
    order = compare(value, param)
    return order is not None and order > 0


def greater_than_or_equal(value: Any, param: Any) -> bool:
    order = compare(value, param)
    return order is not None and order >= 0


def less_than(value: Any, param: Any) -> bool:
    order = compare(value, param)
    return order is not None and order < 0


def less_than_or_equal(value: Any, param: Any) -> bool:
    order = compare(value, param)
    return order is not None and order <= 0


# =============================================================================
# INCLUSION
# =============================================================================


def in_list(value: Any, candidates: Any) -> bool:
    """
    Check if value is one of the candidates.

    A sequence value matches if any of its elements is a candidate.
    """
    if not is_sequence(candidates):
        return False
    if is_sequence(value):
        return any(
            deep_equals(item, candidate) for item in value for candidate in candidates
        )
    return any(deep_equals(value, candidate) for candidate in candidates)


def not_in_list(value: Any, candidates: Any) -> bool:
    return not in_list(value, candidates)


# =============================================================================
# ARRAY
# =============================================================================


def contains_all(value: Any, expected: Any) -> bool:
    """Check that every expected element appears in the sequence value."""
    if not (is_sequence(value) and is_sequence(expected)):
        return False
    return all(any(deep_equals(item, exp) for item in value) for exp in expected)


def has_size(value: Any, size: Any) -> bool:
    """
    Length of a sequence, or character count of a string.

    Strings are counted in code points, so a combining sequence such as
    "e\\u0301" has size 2 even though it renders as one character.
    """
    if not is_integer(size):
        return False
    if is_sequence(value) or isinstance(value, str):
        return len(value) == size
    return False


# =============================================================================
# ELEMENT
# =============================================================================


def exists(value: Any, flag: Any) -> bool:
    present = value is not ABSENT and value is not None
    return present if flag else not present


# Case-insensitive $type names, including the BSON aliases
TYPE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "string": "string",
        "str": "string",
        "number": "number",
        "integer": "integer",
        "int": "integer",
        "long": "integer",
        "float": "float",
        "double": "float",
        "boolean": "boolean",
        "bool": "boolean",
        "map": "map",
        "object": "map",
        "dict": "map",
        "list": "list",
        "array": "list",
        "atom": "atom",
        "date": "date",
        "datetime": "datetime",
        "null": "null",
        "nil": "null",
        "none": "null",
        "objectid": "objectid",
        "regex": "regex",
        "pattern": "regex",
    }
)

# Python classes accepted as $type tags. Checked in order (bool before int,
# datetime before date).
_PYTHON_TYPE_TAGS = (
    (bool, "boolean"),
    (str, "string"),
    (int, "integer"),
    (float, "float"),
    (dict, "map"),
    (list, "list"),
    (tuple, "list"),
    (datetime, "datetime"),
    (date, "date"),
    (type(None), "null"),
    (re.Pattern, "regex"),
    (BsonObjectId, "objectid"),
    (Enum, "atom"),
)

_KIND_TYPE_NAMES: Mapping[Kind, str] = MappingProxyType(
    {
        Kind.NULL: "null",
        Kind.BOOLEAN: "boolean",
        Kind.INTEGER: "integer",
        Kind.FLOAT: "float",
        Kind.TEXT: "string",
        Kind.SEQUENCE: "list",
        Kind.MAPPING: "map",
        Kind.DATE: "date",
        Kind.DATETIME: "datetime",
        Kind.PATTERN: "regex",
        Kind.OBJECTID: "objectid",
        Kind.ATOM: "atom",
    }
)


def normalize_type(tag: Any) -> str:
    """
    Normalize a $type parameter to a canonical type name.

    Accepts a case-insensitive name ("String", "array"), a Python class
    (str, dict, datetime) or a docsift.schema.types tag (class or instance).

    Returns:
        The canonical name, or "unknown"

    Examples:
        >>> normalize_type("Array")
        'list'
        >>> normalize_type(dict)
        'map'
        >>> normalize_type("decimal")
        'unknown'
    """
    if isinstance(tag, str):
        return TYPE_NAMES.get(tag.lower(), "unknown")
    if isinstance(tag, BaseType):
        return tag.type_name
    if isinstance(tag, type):
        if issubclass(tag, BaseType):
            return tag.type_name
        for python_type, name in _PYTHON_TYPE_TAGS:
            if issubclass(tag, python_type):
                return name
    return "unknown"


def type_matches(value: Any, type_name: str) -> bool:
    """Check a value's kind against a canonical type name."""
    kind = kind_of(value)
    if type_name == "number":
        return kind in NUMERIC_KINDS
    return _KIND_TYPE_NAMES.get(kind) == type_name


# =============================================================================
# EVALUATION
# =============================================================================


def modulo(value: Any, param: Any) -> bool:
    """
    value mod divisor == remainder, for param [divisor, remainder].

    The remainder takes the sign of the dividend (-7 mod 5 == -2).
    """
    if not is_sequence(param) or len(param) != 2:
        return False
    divisor, remainder = param
    if not (is_integer(value) and is_integer(divisor) and is_integer(remainder)):
        return False
    if divisor == 0:
        return False
    result = abs(value) % abs(divisor)
    if value < 0:
        result = -result
    return result == remainder


REGEX_OPTIONS: Mapping[str, int] = MappingProxyType(
    {
        "i": re.IGNORECASE,
        "m": re.MULTILINE,
        "s": re.DOTALL,
        "x": re.VERBOSE,
    }
)


def regex_flags(options: Any) -> int:
    """Translate $options letters ("im") to re flags. Unknown letters are ignored."""
    if not isinstance(options, str):
        return 0
    flags = 0
    for letter in options:
        flags |= REGEX_OPTIONS.get(letter, 0)
    return flags


def build_regex(param: Any, options: Any = None) -> Matcher:
    """
    Build a $regex matcher.

    The pattern is compiled once here. An invalid pattern source yields a
    matcher that never matches.
    """
    pattern = to_pattern(param, regex_flags(options))
    if pattern is None:
        logger.debug("Invalid $regex pattern %r, matcher will never match", param)
        return _never

    def _regex(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            return pattern.search(value) is not None
        except TypeError:
            return False

    return _regex


# =============================================================================
# BUILDERS
# =============================================================================


def _predicate(check: Callable[[Any, Any], bool]) -> OperatorBuilder:
    """Bind a (value, param) predicate to its parameter."""

    def _build(param: Any, compile_nested: CompileNested) -> Matcher:
        def _match(value: Any) -> bool:
            return check(value, param)

        return _match

    return _build


def _build_type(param: Any, compile_nested: CompileNested) -> Matcher:
    type_name = normalize_type(param)
    if type_name == "unknown":
        return _never

    def _type(value: Any) -> bool:
        return type_matches(value, type_name)

    return _type


def _build_regex(param: Any, compile_nested: CompileNested) -> Matcher:
    return build_regex(param)


def _build_options(param: Any, compile_nested: CompileNested) -> Matcher:
    # Folded into the sibling $regex by the compiler
    return _always


def _build_elem_match(param: Any, compile_nested: CompileNested) -> Matcher:
    inner = compile_nested(param)

    def _elem_match(value: Any) -> bool:
        return is_sequence(value) and any(inner(item) for item in value)

    return _elem_match


def _build_not(param: Any, compile_nested: CompileNested) -> Matcher:
    inner = compile_nested(param)

    def _not(value: Any) -> bool:
        return not inner(value)

    return _not


def _build_and(param: Any, compile_nested: CompileNested) -> Matcher:
    if not is_sequence(param):
        return _never
    matchers = [compile_nested(query) for query in param]

    def _and(value: Any) -> bool:
        return all(matcher(value) for matcher in matchers)

    return _and


def _build_or(param: Any, compile_nested: CompileNested) -> Matcher:
    if not is_sequence(param):
        return _never
    matchers = [compile_nested(query) for query in param]

    def _or(value: Any) -> bool:
        return any(matcher(value) for matcher in matchers)

    return _or


def _build_nor(param: Any, compile_nested: CompileNested) -> Matcher:
    if not is_sequence(param):
        return _never
    matchers = [compile_nested(query) for query in param]

    def _nor(value: Any) -> bool:
        return not any(matcher(value) for matcher in matchers)

    return _nor


_BUILDERS: Dict[str, OperatorBuilder] = {
    # ── Comparison ──────────────────────────────────────────────────────────
    "$eq": _predicate(equals),  # {"status": {"$eq": "active"}}
    "$ne": _predicate(not_equals),  # {"status": {"$ne": "deleted"}}
    "$gt": _predicate(greater_than),  # {"value": {"$gt": 100}}
    "$gte": _predicate(greater_than_or_equal),
    "$lt": _predicate(less_than),  # {"value": {"$lt": 0}}
    "$lte": _predicate(less_than_or_equal),
    # ── Array ───────────────────────────────────────────────────────────────
    "$in": _predicate(in_list),  # {"type": {"$in": ["A", "B"]}}
    "$nin": _predicate(not_in_list),  # {"type": {"$nin": ["X", "Y"]}}
    "$all": _predicate(contains_all),  # {"tags": {"$all": ["a", "b"]}}
    "$size": _predicate(has_size),  # {"items": {"$size": 3}}
    "$elemMatch": _build_elem_match,  # {"items": {"$elemMatch": {"id": 1}}}
    # ── Element ─────────────────────────────────────────────────────────────
    "$exists": _predicate(exists),  # {"email": {"$exists": True}}
    "$type": _build_type,  # {"value": {"$type": "string"}}
    # ── Evaluation ──────────────────────────────────────────────────────────
    "$mod": _predicate(modulo),  # {"count": {"$mod": [5, 0]}}
    "$regex": _build_regex,  # {"name": {"$regex": "^A"}}
    "$options": _build_options,  # {"name": {"$regex": "^a", "$options": "i"}}
    # ── Logical ─────────────────────────────────────────────────────────────
    "$not": _build_not,  # {"age": {"$not": {"$lt": 30}}}
    "$and": _build_and,  # {"$and": [{"a": 1}, {"b": 2}]}
    "$or": _build_or,  # {"$or": [{"a": 1}, {"b": 2}]}
    "$nor": _build_nor,  # {"$nor": [{"a": 1}, {"b": 2}]}
}

# Read-only view; the table never changes after import
OPERATORS: Mapping[str, OperatorBuilder] = MappingProxyType(_BUILDERS)


def get_builder(name: str) -> Optional[OperatorBuilder]:
    """Look up an operator builder, or None if the name is not registered."""
    return OPERATORS.get(name)
