"""Sibling ordering for the tag hierarchy."""
import logging
from typing import Any, Callable, List, Optional

from tag_hierarchy.models.hierarchy_node import HierarchyNode

logger = logging.getLogger(__name__)

SortKey = Callable[[HierarchyNode], Any]


def default_sort_key(node: HierarchyNode) -> tuple:
    """Order by display name ignoring case, then raw name, then id."""
    name = node.tag.display_name
    return (name.casefold(), name, node.tag.id)


class TagSortController:
    """Orders sibling lists in place without touching parent/child membership."""

    def __init__(self, key: Optional[SortKey] = None, reverse: bool = False):
        """Initialize the sort controller.

        Args:
            key: Key extraction function (defaults to display name ordering).
                Ties on a custom key are broken by tag id.
            reverse: Sort in descending order
        """
        self.key = key
        self.reverse = reverse

    def _effective_key(self) -> SortKey:
        if self.key is None:
            return default_sort_key
        custom_key = self.key
        return lambda node: (custom_key(node), node.tag.id)

    def sort_siblings(self, nodes: List[HierarchyNode]) -> None:
        """Sort one sibling list in place."""
        nodes.sort(key=self._effective_key(), reverse=self.reverse)

    def sort_tree(self, roots: List[HierarchyNode]) -> None:
        """Sort the root list and every children list below it."""
        key = self._effective_key()
        roots.sort(key=key, reverse=self.reverse)

        sorted_lists = 1
        stack = list(roots)
        while stack:
            node = stack.pop()
            if node.children:
                node.sort_children(key, reverse=self.reverse)
                sorted_lists += 1
                stack.extend(node.children)

        logger.debug(f"Sorted {sorted_lists} sibling lists")
