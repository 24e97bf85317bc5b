"""Text search over the tag hierarchy."""
import logging
from itertools import chain
from typing import Iterable, List, Optional, Set

from tag_hierarchy.core.config import settings
from tag_hierarchy.models.hierarchy_node import HierarchyNode

logger = logging.getLogger(__name__)


class TagSearchEngine:
    """Case-insensitive substring search over name, type and description.

    A node is visible when it matches or when any descendant matches, so
    the path from a root to every match stays intact. Searching never
    changes node state.
    """

    def __init__(self, placeholder: Optional[str] = None):
        """Initialize the search engine.

        Args:
            placeholder: Search box placeholder text; a query equal to it is
                treated as empty (defaults to settings.SEARCH_PLACEHOLDER)
        """
        self.placeholder = settings.SEARCH_PLACEHOLDER if placeholder is None else placeholder

    def normalize_query(self, query: Optional[str]) -> str:
        """Return the casefolded query, or "" when it places no constraint.

        The query is not trimmed; surrounding whitespace is part of the match.
        """
        if query is None:
            return ""
        needle = query.casefold()
        if self.placeholder and needle == self.placeholder.casefold():
            return ""
        return needle

    @staticmethod
    def node_matches_own_fields(node: HierarchyNode, needle: str) -> bool:
        tag = node.tag
        return (
            needle in (tag.name or "").casefold()
            or needle in (tag.type or "").casefold()
            or needle in (tag.description or "").casefold()
        )

    def matches(self, node: HierarchyNode, query: Optional[str]) -> bool:
        """True if node or any of its descendants matches the query."""
        needle = self.normalize_query(query)
        if not needle:
            return True
        return any(
            self.node_matches_own_fields(candidate, needle)
            for candidate in chain([node], node.iter_descendants())
        )

    def search(self, roots: Iterable[HierarchyNode], query: Optional[str]) -> List[HierarchyNode]:
        """Return the roots whose subtree contains a match, in root order."""
        roots = list(roots)
        needle = self.normalize_query(query)
        if not needle:
            return roots

        visible = [root for root in roots if self.matches(root, needle)]
        logger.debug(f"Search '{needle}': {len(visible)}/{len(roots)} roots visible")
        return visible

    def matching_nodes(self, roots: Iterable[HierarchyNode], query: Optional[str]) -> List[HierarchyNode]:
        """Nodes matching on their own fields, in depth-first pre-order."""
        needle = self.normalize_query(query)
        nodes = chain.from_iterable(chain([root], root.iter_descendants()) for root in roots)
        if not needle:
            return list(nodes)
        return [node for node in nodes if self.node_matches_own_fields(node, needle)]

    def visible_ids(self, roots: Iterable[HierarchyNode], query: Optional[str]) -> Set[str]:
        """Ids of every match plus all of its ancestors."""
        visible: Set[str] = set()
        for node in self.matching_nodes(roots, query):
            if node.tag.id in visible:
                continue
            visible.add(node.tag.id)
            for ancestor in node.ancestors():
                if ancestor.tag.id in visible:
                    break
                visible.add(ancestor.tag.id)
        return visible
