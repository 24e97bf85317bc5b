"""Exceptions raised by the tag hierarchy package."""
from typing import Optional


class TagHierarchyError(Exception):
    """Base class for all tag hierarchy errors."""


class TagNotFoundError(TagHierarchyError):
    """A lookup or mutation referenced a tag id that does not exist."""

    def __init__(self, tag_id: str, message: Optional[str] = None):
        self.tag_id = tag_id
        super().__init__(message or f"Tag not found: {tag_id!r}")


class TagValidationError(TagHierarchyError):
    """A tag mutation was rejected before reaching the store."""


class TagStoreError(TagHierarchyError):
    """The tag store failed (network, HTTP status or database error)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
