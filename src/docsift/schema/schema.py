"""
Schema definition for documents read from Parquet.
"""

from typing import Any, Dict, List

import pyarrow as pa

from docsift.constants import PATH_SEPARATOR
from .types import BaseType, ObjectId, Struct


class Schema:
    """
    Field name to type tag mapping for a document collection.

    Example:
        >>> schema = Schema(fields={
        ...     "_id": ObjectId(),
        ...     "name": String(),
        ...     "meta": Struct({"score": Int(), "owner": ObjectId()}),
        ... })
        >>> schema.objectid_fields()
        ['_id', 'meta.owner']
    """

    def __init__(self, fields: Dict[str, BaseType]):
        self.fields = dict(fields)

    def to_arrow(self) -> pa.Schema:
        """Convert to PyArrow schema."""
        return pa.schema(
            [(name, field_type.to_arrow()) for name, field_type in self.fields.items()]
        )

    def decode(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Rebuild document values read from Parquet, field by field.

        Undeclared fields are returned unchanged.
        """
        return {
            key: self.fields[key].decode(value) if key in self.fields else value
            for key, value in document.items()
        }

    def has_field(self, name: str) -> bool:
        """Check a top-level or dotted nested field is declared."""
        fields = self.fields
        *parents, leaf = name.split(PATH_SEPARATOR)
        for part in parents:
            field_type = fields.get(part)
            if not isinstance(field_type, Struct):
                return False
            fields = field_type.fields
        return leaf in fields

    def objectid_fields(self) -> List[str]:
        """Dotted paths of every ObjectId field, including nested structs."""
        found: List[str] = []

        def _walk(fields: Dict[str, BaseType], prefix: str) -> None:
            for name, field_type in fields.items():
                path = f"{prefix}{name}"
                if isinstance(field_type, ObjectId):
                    found.append(path)
                elif isinstance(field_type, Struct):
                    _walk(field_type.fields, f"{path}{PATH_SEPARATOR}")

        _walk(self.fields, "")
        return found

    def __repr__(self) -> str:
        return f"Schema({self.fields!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Schema) and self.fields == other.fields
