"""Services package for hierarchy logic and store integrations."""

from tag_hierarchy.services.hierarchy_manager import HierarchyManager
from tag_hierarchy.services.tag_hierarchy_service import TagHierarchyService
from tag_hierarchy.services.textlab_client import TextLabTagClient

__all__ = ["HierarchyManager", "TagHierarchyService", "TextLabTagClient"]
