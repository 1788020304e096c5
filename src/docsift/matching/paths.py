"""
Dotted property path resolution.

A shape expression key such as "user.profile.age" is compiled once into a
PathResolver. Resolving walks mappings one segment at a time and returns the
value found, or ABSENT as soon as a segment is missing or the current value
is not a mapping:

    >>> resolver = compile_path("user.profile.age")
    >>> resolver({"user": {"profile": {"age": 30}}})
    30
    >>> resolver({"user": {"profile": {}}})
    ABSENT
    >>> resolver({"user": "alice"})
    ABSENT

Sequences are not indexed into: "tags.0" on {"tags": ["a"]} is ABSENT.
"""

import re
from collections.abc import Mapping
from typing import Any, Callable, Sequence, Tuple

from docsift.constants import PATH_SEPARATOR
from docsift.matching.values import ABSENT

PathResolver = Callable[[Any], Any]

_NUMERIC_SEGMENT = re.compile(r"[0-9]+")


def split_path(path: Any) -> Tuple[str, ...]:
    """Split a dotted key into segments. Non-string keys are stringified."""
    return tuple(str(path).split(PATH_SEPARATOR))


def is_numeric_segment(segment: str) -> bool:
    """True if the segment is a non-negative integer ("0", "12")."""
    return _NUMERIC_SEGMENT.fullmatch(segment) is not None


def compile_path(path: Any) -> PathResolver:
    """Build a resolver for a dotted key."""
    return compile_segments(split_path(path))


def compile_segments(segments: Sequence[str]) -> PathResolver:
    """
    Build a resolver for an already split path.

    An empty segment list resolves every value to itself.
    """
    segments = tuple(segments)

    if not segments:
        return _identity

    if len(segments) == 1:
        key = segments[0]

        def _resolve_one(root: Any) -> Any:
            if isinstance(root, Mapping):
                return root.get(key, ABSENT)
            return ABSENT

        return _resolve_one

    def _resolve(root: Any) -> Any:
        current = root
        for key in segments:
            if not isinstance(current, Mapping):
                return ABSENT
            current = current.get(key, ABSENT)
            if current is ABSENT:
                return ABSENT
        return current

    return _resolve


def _identity(root: Any) -> Any:
    return root
