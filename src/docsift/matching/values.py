"""
Value model for docsift.

Documents and query literals are plain Python objects. This module sorts them
into a closed set of kinds and defines the two relations every operator is
built from: structural equality and ordering.

================================================================================
KINDS
================================================================================

    NULL       None
    BOOLEAN    bool, numpy.bool_
    INTEGER    numbers.Integral except bool (int, bson Int64, numpy ints)
    FLOAT      any other numbers.Real (float, numpy floats)
    TEXT       str
    SEQUENCE   list, tuple
    MAPPING    collections.abc.Mapping
    DATE       datetime.date that is not a datetime
    DATETIME   datetime.datetime (pandas.Timestamp included)
    PATTERN    re.Pattern, bson.regex.Regex
    OBJECTID   bson.ObjectId
    ATOM       enum.Enum members
    OTHER      anything else, compared with == only
    ABSENT     the ABSENT sentinel produced by path resolution

================================================================================
EQUALITY (deep_equals)
================================================================================

deep_equals(value, expected) is oriented: ``value`` comes from the document,
``expected`` from the query. The orientation only matters for patterns, which
match Text document values when they appear on the expected side:

    deep_equals("Alice", re.compile("^A"))   -> True
    deep_equals(re.compile("^A"), "Alice")   -> False

A missing value (ABSENT) equals an expected None, so {"field": None} matches
documents without "field". ABSENT equals nothing else.

================================================================================
ORDERING (compare)
================================================================================

Numbers compare with numbers, text with text, dates with dates and datetimes
with datetimes of the same awareness. Every other pair is unordered and
compare() returns None.
"""

import math
import numbers
import re
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from bson import ObjectId
from bson.regex import Regex


class _Absent:
    """Marker for a path that does not exist in a document."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


class Kind(Enum):
    """Closed set of value kinds."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "string"
    SEQUENCE = "list"
    MAPPING = "map"
    DATE = "date"
    DATETIME = "datetime"
    PATTERN = "regex"
    OBJECTID = "objectid"
    ATOM = "atom"
    OTHER = "other"
    ABSENT = "absent"


NUMERIC_KINDS = frozenset({Kind.INTEGER, Kind.FLOAT})


def _is_bool(value: Any) -> bool:
    # numpy.bool_ is neither a bool nor a registered Integral
    if isinstance(value, bool):
        return True
    dtype = getattr(value, "dtype", None)
    return getattr(dtype, "kind", None) == "b" and getattr(value, "shape", None) == ()


def kind_of(value: Any) -> Kind:
    """
    Classify a value.

    Order matters: bool is an int subclass, datetime is a date subclass and
    IntEnum members are ints.

    Examples:
        >>> kind_of(True)
        <Kind.BOOLEAN: 'boolean'>
        >>> kind_of(3)
        <Kind.INTEGER: 'integer'>
        >>> kind_of(datetime(2024, 1, 1))
        <Kind.DATETIME: 'datetime'>
    """
    if value is ABSENT:
        return Kind.ABSENT
    if value is None:
        return Kind.NULL
    if _is_bool(value):
        return Kind.BOOLEAN
    if isinstance(value, str):
        return Kind.TEXT
    if isinstance(value, Enum):
        return Kind.ATOM
    if isinstance(value, numbers.Integral):
        return Kind.INTEGER
    if isinstance(value, numbers.Real):
        return Kind.FLOAT
    if isinstance(value, (list, tuple)):
        return Kind.SEQUENCE
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, datetime):
        return Kind.DATETIME
    if isinstance(value, date):
        return Kind.DATE
    if isinstance(value, (re.Pattern, Regex)):
        return Kind.PATTERN
    if isinstance(value, ObjectId):
        return Kind.OBJECTID
    return Kind.OTHER


def is_integer(value: Any) -> bool:
    """True for integers, excluding booleans."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def to_pattern(value: Any, flags: int = 0) -> Optional["re.Pattern[str]"]:
    """
    Compile a pattern source or convert a bson Regex.

    Returns:
        A compiled pattern, or None when the source is not a valid pattern
    """
    try:
        if isinstance(value, re.Pattern):
            if flags and (value.flags & flags) != flags:
                return re.compile(value.pattern, value.flags | flags)
            return value
        if isinstance(value, Regex):
            pattern = value.try_compile()
            if flags:
                pattern = re.compile(pattern.pattern, pattern.flags | flags)
            return pattern
        if isinstance(value, str):
            return re.compile(value, flags)
    except (re.error, TypeError, ValueError, OverflowError):
        return None
    return None


def pattern_matches(pattern: Any, value: Any) -> bool:
    """Search ``value`` with ``pattern``; non-text values never match."""
    if not isinstance(value, str):
        return False
    compiled = to_pattern(pattern)
    if compiled is None:
        return False
    try:
        return compiled.search(value) is not None
    except TypeError:
        # bytes pattern against a str
        return False


def _same_pattern(a: Any, b: Any) -> bool:
    pa_, pb_ = to_pattern(a), to_pattern(b)
    if pa_ is None or pb_ is None:
        return False
    return pa_.pattern == pb_.pattern and pa_.flags == pb_.flags


def _aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _scalar_equals(value: Any, expected: Any, value_kind: Kind, expected_kind: Kind) -> bool:
    if value_kind in NUMERIC_KINDS and expected_kind in NUMERIC_KINDS:
        if value == expected:
            return True
        # NaN is equal to itself here so that equality stays reflexive
        return (
            value_kind is Kind.FLOAT
            and expected_kind is Kind.FLOAT
            and math.isnan(value)
            and math.isnan(expected)
        )
    if expected_kind is Kind.PATTERN:
        if value_kind is Kind.TEXT:
            return pattern_matches(expected, value)
        if value_kind is Kind.PATTERN:
            return _same_pattern(value, expected)
        return False
    if value_kind is not expected_kind:
        return False
    if value_kind is Kind.DATETIME and _aware(value) != _aware(expected):
        return False
    try:
        return bool(value == expected)
    except (TypeError, ValueError):
        # Objects with exotic __eq__ (numpy arrays and the like)
        return False


def deep_equals(value: Any, expected: Any) -> bool:
    """
    Structural equality between a document value and a query value.

    Sequences must have the same length and equal elements in order. Mappings
    must have the same key set and equal values. Runs on an explicit stack,
    so nesting depth is only limited by memory.

    Examples:
        >>> deep_equals({"a": [1, 2]}, {"a": [1, 2.0]})
        True
        >>> deep_equals({"a": 1, "b": 2}, {"a": 1})
        False
        >>> deep_equals(ABSENT, None)
        True
    """
    stack: List[Tuple[Any, Any]] = [(value, expected)]

    while stack:
        left, right = stack.pop()
        if left is right:
            continue

        left_kind = kind_of(left)
        right_kind = kind_of(right)

        if left_kind is Kind.ABSENT:
            if right_kind is Kind.NULL:
                continue
            return False

        if left_kind is Kind.SEQUENCE and right_kind is Kind.SEQUENCE:
            if len(left) != len(right):
                return False
            stack.extend(zip(left, right))
            continue

        if left_kind is Kind.MAPPING and right_kind is Kind.MAPPING:
            if len(left) != len(right):
                return False
            for key, expected_item in right.items():
                if key not in left:
                    return False
                stack.append((left[key], expected_item))
            continue

        if not _scalar_equals(left, right, left_kind, right_kind):
            return False

    return True


def compare(value: Any, param: Any) -> Optional[int]:
    """
    Order two values.

    Returns:
        -1, 0 or 1 when the pair is ordered, None otherwise

    Examples:
        >>> compare(3, 2.5)
        1
        >>> compare("abc", "abd")
        -1
        >>> compare("3", 2) is None
        True
    """
    value_kind = kind_of(value)
    param_kind = kind_of(param)

    if value_kind in NUMERIC_KINDS and param_kind in NUMERIC_KINDS:
        pass
    elif value_kind is not param_kind:
        return None
    elif value_kind is Kind.DATETIME:
        if _aware(value) != _aware(param):
            return None
    elif value_kind not in (Kind.TEXT, Kind.DATE):
        return None

    try:
        if value < param:
            return -1
        if value > param:
            return 1
        if value == param:
            return 0
    except (TypeError, ValueError):
        return None
    # NaN is unordered
    return None
