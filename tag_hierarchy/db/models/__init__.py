"""Database models package."""
from tag_hierarchy.db.models.document_tag import DocumentTag
from tag_hierarchy.db.models.tag import Tag

__all__ = [
    "Tag",
    "DocumentTag",
]
