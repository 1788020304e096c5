"""
Exceptions raised by docsift.

Only compilation can fail. Matchers never raise: a document that cannot be
compared simply does not match.
"""

from typing import Optional


class DocsiftError(Exception):
    """Base class for all docsift errors."""


class CompilationError(DocsiftError, ValueError):
    """
    A query could not be compiled into a matcher.

    Attributes:
        operator: The offending operator name, if the failure is tied to one
        path: Dotted location of the failure inside the query ("" for the root)
    """

    def __init__(
        self,
        message: str,
        operator: Optional[str] = None,
        path: str = "",
    ):
        super().__init__(message)
        self.operator = operator
        self.path = path

    @classmethod
    def unknown_operator(cls, operator: str, path: str = "") -> "CompilationError":
        where = f" at '{path}'" if path else ""
        return cls(f"Unknown operator: {operator}{where}", operator=operator, path=path)
