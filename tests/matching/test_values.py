"""
Tests for docsift.matching.values.

Covers:
- kind_of() classification, including the bool/int and datetime/date traps
- deep_equals() structural rules and pattern orientation
- compare() ordering across kinds
"""

import re
from datetime import date, datetime, timedelta, timezone
from enum import Enum

import numpy as np
import pytest
from bson import ObjectId
from bson.int64 import Int64
from bson.regex import Regex

from docsift.matching.values import (
    ABSENT,
    Kind,
    compare,
    deep_equals,
    kind_of,
    pattern_matches,
    to_pattern,
)


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class TestKindOf:
    """Test value classification."""

    @pytest.mark.parametrize(
        "value, kind",
        [
            (None, Kind.NULL),
            (True, Kind.BOOLEAN),
            (False, Kind.BOOLEAN),
            (3, Kind.INTEGER),
            (Int64(3), Kind.INTEGER),
            (2.5, Kind.FLOAT),
            ("text", Kind.TEXT),
            ([1, 2], Kind.SEQUENCE),
            ((1, 2), Kind.SEQUENCE),
            ({"a": 1}, Kind.MAPPING),
            (date(2024, 1, 1), Kind.DATE),
            (datetime(2024, 1, 1), Kind.DATETIME),
            (re.compile("a"), Kind.PATTERN),
            (Regex("a"), Kind.PATTERN),
            (ObjectId(), Kind.OBJECTID),
            (Color.RED, Kind.ATOM),
            (b"bytes", Kind.OTHER),
            (ABSENT, Kind.ABSENT),
        ],
    )
    def test_classifies_value(self, value, kind):
        assert kind_of(value) is kind

    def test_numpy_scalars(self):
        """numpy scalars classify like their Python counterparts."""
        assert kind_of(np.True_) is Kind.BOOLEAN
        assert kind_of(np.int64(3)) is Kind.INTEGER
        assert kind_of(np.float64(2.5)) is Kind.FLOAT
        assert kind_of(np.array([True, False])) is Kind.OTHER

    def test_numpy_bool_equals_bool(self):
        assert deep_equals(np.True_, True)
        assert deep_equals({"a": [np.False_]}, {"a": [False]})
        assert not deep_equals(np.True_, 1)

    def test_absent_is_falsy_singleton(self):
        """ABSENT is a single falsy marker distinct from None."""
        assert not ABSENT
        assert ABSENT is not None
        assert repr(ABSENT) == "ABSENT"
        assert type(ABSENT)() is ABSENT


class TestDeepEquals:
    """Test structural equality."""

    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            42,
            4.2,
            float("nan"),
            "text",
            [1, [2, 3]],
            {"a": {"b": [1, 2]}},
            date(2024, 1, 1),
            datetime(2024, 1, 1, 12, tzinfo=timezone.utc),
            ObjectId("507f1f77bcf86cd799439011"),
            Color.RED,
        ],
    )
    def test_reflexive(self, value):
        assert deep_equals(value, value)

    def test_sequences_compare_in_order(self):
        assert deep_equals([1, 2, 3], [1, 2, 3])
        assert not deep_equals([1, 2, 3], [3, 2, 1])
        assert not deep_equals([1, 2], [1, 2, 3])

    def test_lists_and_tuples_are_both_sequences(self):
        assert deep_equals((1, 2), [1, 2])

    def test_mappings_need_identical_key_sets(self):
        assert deep_equals({"a": 1, "b": 2}, {"b": 2, "a": 1})
        assert not deep_equals({"a": 1, "b": 2}, {"a": 1})
        assert not deep_equals({"a": 1}, {"a": 1, "b": 2})
        assert not deep_equals({"a": 1, "b": 2}, {"a": 1, "c": 2})

    def test_mapping_and_sequence_equality_is_symmetric(self):
        left = {"a": [1, {"b": "x"}], "c": None}
        right = {"c": None, "a": [1, {"b": "x"}]}
        assert deep_equals(left, right)
        assert deep_equals(right, left)

    def test_integers_and_floats_compare_numerically(self):
        assert deep_equals(1, 1.0)
        assert deep_equals({"score": [1, 2]}, {"score": [1.0, 2.0]})

    def test_booleans_are_not_numbers(self):
        assert not deep_equals(True, 1)
        assert not deep_equals(0, False)

    def test_null_equals_only_null(self):
        assert deep_equals(None, None)
        assert not deep_equals(None, 0)
        assert not deep_equals(None, "")
        assert not deep_equals(0, None)

    def test_absent_equals_expected_null_only(self):
        assert deep_equals(ABSENT, None)
        assert not deep_equals(ABSENT, 0)
        assert not deep_equals(ABSENT, "")
        assert not deep_equals(None, ABSENT)

    def test_mismatched_kinds_never_equal(self):
        assert not deep_equals("1", 1)
        assert not deep_equals([1], 1)
        assert not deep_equals(Color.RED, "red")
        assert not deep_equals(date(2024, 1, 1), datetime(2024, 1, 1))

    def test_datetimes_compare_chronologically(self):
        utc = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        plus_two = datetime(2024, 1, 1, 14, tzinfo=timezone(timedelta(hours=2)))
        assert deep_equals(utc, plus_two)

    def test_naive_and_aware_datetimes_differ(self):
        assert not deep_equals(
            datetime(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc)
        )

    def test_pattern_matches_text_on_expected_side_only(self):
        pattern = re.compile("^A")
        assert deep_equals("Alice", pattern)
        assert not deep_equals("Bob", pattern)
        assert not deep_equals(pattern, "Alice")
        assert not deep_equals(42, pattern)

    def test_patterns_inside_structures(self):
        assert deep_equals(["Alice", "Bob"], [re.compile("^A"), "Bob"])

    def test_bson_regex_behaves_like_pattern(self):
        assert deep_equals("alice", Regex("^A", "i"))

    def test_patterns_equal_by_source_and_flags(self):
        assert deep_equals(re.compile("a", re.I), re.compile("a", re.I))
        assert not deep_equals(re.compile("a"), re.compile("a", re.I))

    def test_deeply_nested_documents_do_not_exhaust_stack(self):
        left: dict = {}
        right: dict = {}
        cursor_left, cursor_right = left, right
        for _ in range(5000):
            cursor_left["n"] = {}
            cursor_right["n"] = {}
            cursor_left, cursor_right = cursor_left["n"], cursor_right["n"]
        assert deep_equals(left, right)
        cursor_right["extra"] = 1
        assert not deep_equals(left, right)


class TestCompare:
    """Test ordering."""

    def test_numbers(self):
        assert compare(3, 2) == 1
        assert compare(2, 2.0) == 0
        assert compare(1.5, 2) == -1

    def test_text_is_lexicographic(self):
        assert compare("apple", "banana") == -1
        assert compare("b", "a") == 1

    def test_dates_and_datetimes(self):
        assert compare(date(2024, 1, 2), date(2024, 1, 1)) == 1
        assert compare(datetime(2024, 1, 1), datetime(2024, 1, 2)) == -1

    @pytest.mark.parametrize(
        "value, param",
        [
            ("3", 2),
            (3, "2"),
            (True, 0),
            (None, 1),
            (ABSENT, 1),
            ([3], 2),
            (date(2024, 1, 1), datetime(2024, 1, 1)),
            (datetime(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc)),
            (float("nan"), 1.0),
        ],
    )
    def test_unordered_pairs(self, value, param):
        assert compare(value, param) is None


class TestPatterns:
    """Test pattern helpers."""

    def test_invalid_source_gives_none(self):
        assert to_pattern("[unclosed") is None

    def test_flags_are_added(self):
        pattern = to_pattern("^a", re.IGNORECASE)
        assert pattern.search("ABC")

    def test_non_text_never_matches(self):
        assert not pattern_matches(re.compile("1"), 1)
