"""Bulk expand/collapse of hierarchy view state."""
import logging
import sys
from typing import Iterable

from tag_hierarchy.models.hierarchy_node import HierarchyNode

logger = logging.getLogger(__name__)


class ExpansionController:
    """Applies the ``expanded`` flag across the tree.

    These operations only touch view state; structure and counts are
    never affected.
    """

    def expand_to_level(self, roots: Iterable[HierarchyNode], max_level: int) -> int:
        """Expand every node whose level is below max_level.

        Nodes at or beyond max_level keep whatever state they had.

        Args:
            roots: Root nodes to start from
            max_level: Exclusive depth limit (1 expands only the roots)

        Returns:
            Number of nodes visited and expanded
        """
        expanded = 0
        stack = [(root, 0) for root in roots]
        while stack:
            node, level = stack.pop()
            if level >= max_level:
                continue
            node.expanded = True
            expanded += 1
            stack.extend((child, level + 1) for child in node.children)

        logger.debug(f"Expanded {expanded} nodes down to level {max_level}")
        return expanded

    def expand_all(self, roots: Iterable[HierarchyNode]) -> int:
        return self.expand_to_level(roots, sys.maxsize)

    def collapse_all(self, roots: Iterable[HierarchyNode]) -> int:
        """Collapse the given roots only; descendants keep their flags."""
        collapsed = 0
        for root in roots:
            root.expanded = False
            collapsed += 1
        return collapsed

    def expand_path(self, node: HierarchyNode) -> None:
        """Expand every ancestor of node so that it is shown."""
        for ancestor in node.ancestors():
            ancestor.expanded = True
