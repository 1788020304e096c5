"""
Type tags for docsift.

A tag names one kind of document value and is used in two places:

- **$type queries**: ``{"owner": {"$type": Types.ObjectId}}`` means the same
  as ``{"owner": {"$type": "objectid"}}``. Tag classes and tag instances are
  both accepted.
- **Parquet sources**: a Schema of tags describes the PyArrow schema of a
  collection on disk (to_arrow), and turns the values read from it into
  document values (decode). ObjectIds stored as 24-character hex strings
  come back as bson ObjectIds.

Tags:
- Scalars: String, Int, Float, Bool, Date, Timestamp, ObjectId, Regex, Null
- Containers: Struct (nested documents), List (arrays)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any as AnyValue
from typing import Dict, Optional

import pyarrow as pa
from bson import ObjectId as BsonObjectId

logger = logging.getLogger(__name__)


class BaseType(ABC):
    """A document value kind that can also be stored in Parquet."""

    # Canonical $type name matched by this tag
    type_name: str = "unknown"

    @abstractmethod
    def to_arrow(self) -> pa.DataType:
        """Arrow type of the column holding values of this kind."""

    def decode(self, raw: AnyValue) -> AnyValue:
        """Rebuild a document value from what Parquet returned."""
        return raw

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other) -> bool:
        # Parameterless tags are interchangeable
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self).__name__)


class String(BaseType):
    type_name = "string"

    def to_arrow(self) -> pa.DataType:
        return pa.string()


@dataclass(frozen=True)
class Int(BaseType):
    """Integer column, 32 or 64 bits wide."""

    bits: int = 64

    type_name = "integer"

    def __post_init__(self):
        if self.bits not in (32, 64):
            raise ValueError(f"Int supports 32 or 64 bits, got {self.bits}")

    def to_arrow(self) -> pa.DataType:
        return pa.int32() if self.bits == 32 else pa.int64()


@dataclass(frozen=True)
class Float(BaseType):
    """Floating-point column, 32 or 64 bits wide."""

    bits: int = 64

    type_name = "float"

    def __post_init__(self):
        if self.bits not in (32, 64):
            raise ValueError(f"Float supports 32 or 64 bits, got {self.bits}")

    def to_arrow(self) -> pa.DataType:
        return pa.float32() if self.bits == 32 else pa.float64()


class Bool(BaseType):
    type_name = "boolean"

    def to_arrow(self) -> pa.DataType:
        return pa.bool_()


class Date(BaseType):
    """Calendar date (datetime.date), no time of day."""

    type_name = "date"

    def to_arrow(self) -> pa.DataType:
        return pa.date32()


@dataclass(frozen=True)
class Timestamp(BaseType):
    """
    datetime.datetime values.

    Pass tz (for example "UTC") for timezone-aware values. Naive and aware
    datetimes never compare equal in queries, so the column type decides
    which kind comes back from Parquet.
    """

    unit: str = "us"
    tz: Optional[str] = None

    type_name = "datetime"

    def __post_init__(self):
        if self.unit not in ("s", "ms", "us", "ns"):
            raise ValueError(
                f"Timestamp unit must be 's', 'ms', 'us' or 'ns', got {self.unit!r}"
            )

    def to_arrow(self) -> pa.DataType:
        return pa.timestamp(self.unit, tz=self.tz)


class ObjectId(BaseType):
    """bson ObjectId, stored as its hex string."""

    type_name = "objectid"

    def to_arrow(self) -> pa.DataType:
        return pa.string()

    def decode(self, raw: AnyValue) -> AnyValue:
        if not isinstance(raw, str):
            return raw
        if not BsonObjectId.is_valid(raw):
            logger.warning("Value declared as ObjectId is not a valid ObjectId: %r", raw)
            return raw
        return BsonObjectId(raw)


class Regex(BaseType):
    """Compiled pattern, stored as its source text."""

    type_name = "regex"

    def to_arrow(self) -> pa.DataType:
        return pa.string()


class Null(BaseType):
    type_name = "null"

    def to_arrow(self) -> pa.DataType:
        return pa.null()


class Struct(BaseType):
    """
    Nested document with declared fields.

    Example:
        >>> Struct({"score": Int(), "owner": ObjectId()}).to_arrow()
        StructType(struct<score: int64, owner: string>)
    """

    type_name = "map"

    def __init__(self, fields: Optional[Dict[str, BaseType]] = None):
        self.fields = dict(fields or {})

    def to_arrow(self) -> pa.DataType:
        return pa.struct(
            [(name, tag.to_arrow()) for name, tag in self.fields.items()]
        )

    def decode(self, raw: AnyValue) -> AnyValue:
        if not isinstance(raw, dict):
            return raw
        return {
            key: self.fields[key].decode(value) if key in self.fields else value
            for key, value in raw.items()
        }

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}: {tag!r}" for name, tag in self.fields.items())
        return f"Struct({{{inner}}})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Struct) and self.fields == other.fields

    def __hash__(self) -> int:
        return hash(("Struct", tuple(sorted(self.fields))))


class List(BaseType):
    """Array whose elements share one tag (String unless given)."""

    type_name = "list"

    def __init__(self, element_type: Optional[BaseType] = None):
        self.element_type = element_type or String()

    def to_arrow(self) -> pa.DataType:
        return pa.list_(self.element_type.to_arrow())

    def decode(self, raw: AnyValue) -> AnyValue:
        if not isinstance(raw, list):
            return raw
        return [self.element_type.decode(item) for item in raw]

    def __repr__(self) -> str:
        return f"List({self.element_type!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, List) and self.element_type == other.element_type

    def __hash__(self) -> int:
        return hash(("List", self.element_type))
