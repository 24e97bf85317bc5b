"""Tag hierarchy service keeping a HierarchyManager in sync with a tag store."""
import logging
from typing import Any, Dict, Optional

from tag_hierarchy.core.exceptions import TagNotFoundError, TagValidationError
from tag_hierarchy.models.tag import TagCreate, TagRecord
from tag_hierarchy.repositories.tag_store import TagStore
from tag_hierarchy.services.hierarchy_manager import HierarchyManager

logger = logging.getLogger(__name__)


class TagHierarchyService:
    """Service for loading and editing the tag hierarchy.

    The store is the source of truth. Every successful mutation is followed
    by a full reload, since any change may move parent relationships; the
    tree is never patched incrementally.
    """

    def __init__(self, store: TagStore, manager: Optional[HierarchyManager] = None):
        """Initialize the tag hierarchy service.

        Args:
            store: Tag store to read snapshots from and write mutations to
            manager: Hierarchy manager to populate (a new one by default)
        """
        self.store = store
        self.manager = manager or HierarchyManager()

    def load(self, preserve_view_state: bool = True) -> Dict[str, Any]:
        """Fetch a fresh snapshot, rebuild the hierarchy and apply counts.

        Args:
            preserve_view_state: Keep expanded/selected flags of tags that
                survive the reload

        Returns:
            Summary of the rebuilt hierarchy
        """
        records = self.store.fetch_all_tags()
        issues = self.manager.rebuild(records, preserve_view_state=preserve_view_state)
        self.refresh_counts()

        summary = self.manager.summary()
        logger.info(
            f"Loaded {summary['total_tags']} tags, {summary['root_count']} roots "
            f"({len(issues)} data issues)"
        )
        return summary

    def refresh_counts(self) -> Dict[str, int]:
        """Re-fetch direct document counts and recompute totals."""
        return self.manager.update_counts(self.store.fetch_direct_counts())

    def _check_parent(self, tag_id: Optional[str], parent_id: Optional[str]) -> None:
        if parent_id is None or tag_id is None:
            return
        if parent_id == tag_id:
            raise TagValidationError(f"Tag '{tag_id}' cannot be its own parent")

        node = self.manager.find_node(tag_id)
        if node is not None and any(d.tag.id == parent_id for d in node.iter_descendants()):
            raise TagValidationError(f"Tag '{parent_id}' is a descendant of '{tag_id}' and cannot be its parent")

    def create_tag(self, payload: TagCreate) -> TagRecord:
        """Create a tag in the store and reload the hierarchy."""
        record = self.store.create_tag(payload)
        logger.info(f"Tag created: {record.name}")
        self.load()
        return record

    def update_tag(self, tag_id: str, payload: TagCreate) -> TagRecord:
        """Replace a tag in the store and reload the hierarchy.

        Raises:
            TagValidationError: If the new parent is the tag or a descendant
            TagNotFoundError: If the store does not know tag_id
        """
        self._check_parent(tag_id, payload.parent_id)
        record = self.store.update_tag(tag_id, payload)
        logger.info(f"Tag updated: {record.name}")
        self.load()
        return record

    def delete_tag(self, tag_id: str) -> None:
        """Delete a tag from the store and reload the hierarchy.

        Raises:
            TagNotFoundError: If the store does not know tag_id
        """
        if not self.store.delete_tag(tag_id):
            raise TagNotFoundError(tag_id)
        logger.info(f"Tag deleted: {tag_id}")
        self.load()
