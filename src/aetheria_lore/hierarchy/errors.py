"""
Exception hierarchy for lore tree traversal.

Absence of a match is never an exception: the resolver returns ``None`` or
an empty ``AncestorPath``. These errors are reserved for data that cannot be
traversed at all.
"""

from __future__ import annotations

from typing import Any


class HierarchyError(Exception):
    """Base exception for all hierarchy errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary of additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize the error.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MalformedDataError(HierarchyError):
    """A node or container is not a mapping where traversal expected one.

    Attributes:
        path: Keys leading to the offending value
    """

    def __init__(
        self,
        message: str,
        path: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            path: Keys leading to the offending value
            details: Optional dictionary of additional error context
        """
        super().__init__(message, details)
        self.path = list(path or [])


class CycleDetectedError(MalformedDataError):
    """The tree refers back to one of its own ancestors, or nests deeper than allowed."""
    pass


__all__ = [
    "HierarchyError",
    "MalformedDataError",
    "CycleDetectedError",
]
