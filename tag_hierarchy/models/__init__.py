"""Tag and hierarchy models."""
from tag_hierarchy.models.hierarchy_node import HierarchyNode
from tag_hierarchy.models.tag import TagCreate, TagRecord

__all__ = [
    "TagRecord",
    "TagCreate",
    "HierarchyNode",
]
