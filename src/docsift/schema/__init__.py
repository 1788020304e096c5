"""
Schema system for docsift.

Provides type tags usable in $type queries and schema definitions for
documents stored in Parquet.
"""

from .types import (
    BaseType,
    String,
    Int,
    Float,
    Bool,
    Date,
    Timestamp,
    ObjectId,
    Regex,
    Null,
    Struct,
    List,
)
from .schema import Schema

# Import types module for Types.X syntax
from . import types as Types

__all__ = [
    # Types module for Types.X syntax
    "Types",
    "Schema",
    # Individual type classes
    "BaseType",
    "String",
    "Int",
    "Float",
    "Bool",
    "Date",
    "Timestamp",
    "ObjectId",
    "Regex",
    "Null",
    "Struct",
    "List",
]
