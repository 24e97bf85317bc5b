"""Repository exports."""
from tag_hierarchy.repositories.tag_repository import TagRepository
from tag_hierarchy.repositories.tag_store import TagStore

__all__ = [
    "TagRepository",
    "TagStore",
]
