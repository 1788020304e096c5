"""Tests for dotted path resolution."""

import pytest

from docsift.matching.paths import (
    compile_path,
    compile_segments,
    is_numeric_segment,
    split_path,
)
from docsift.matching.values import ABSENT


class TestSplitPath:
    """Test key splitting."""

    def test_dotted_key(self):
        assert split_path("user.profile.age") == ("user", "profile", "age")

    def test_plain_key(self):
        assert split_path("age") == ("age",)

    def test_non_string_key_is_stringified(self):
        assert split_path(7) == ("7",)

    @pytest.mark.parametrize(
        "segment, expected",
        [("0", True), ("12", True), ("-1", False), ("1a", False), ("", False)],
    )
    def test_numeric_segment(self, segment, expected):
        assert is_numeric_segment(segment) is expected


class TestCompilePath:
    """Test resolver behaviour."""

    def test_resolves_nested_value(self):
        resolve = compile_path("user.profile.age")
        assert resolve({"user": {"profile": {"age": 30}}}) == 30

    def test_missing_leaf_is_absent(self):
        resolve = compile_path("user.profile.age")
        assert resolve({"user": {"profile": {}}}) is ABSENT

    def test_missing_intermediate_is_absent(self):
        resolve = compile_path("user.profile.age")
        assert resolve({"other": 1}) is ABSENT

    def test_non_mapping_intermediate_is_absent(self):
        resolve = compile_path("user.profile")
        assert resolve({"user": "alice"}) is ABSENT
        assert resolve("not a document") is ABSENT

    def test_explicit_null_is_not_absent(self):
        resolve = compile_path("email")
        assert resolve({"email": None}) is None

    def test_sequences_are_not_indexed(self):
        """Numeric segments are plain keys, lists are never indexed."""
        resolve = compile_path("tags.0")
        assert resolve({"tags": ["a", "b"]}) is ABSENT
        assert resolve({"tags": {"0": "a"}}) == "a"

    def test_empty_segments_are_identity(self):
        resolve = compile_segments([])
        document = {"a": 1}
        assert resolve(document) is document

    def test_resolver_is_reusable(self):
        resolve = compile_path("a.b")
        assert [resolve({"a": {"b": n}}) for n in range(3)] == [0, 1, 2]
