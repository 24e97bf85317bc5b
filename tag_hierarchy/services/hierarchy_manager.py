"""Facade owning the tag forest and exposing hierarchy operations."""
import logging
from itertools import chain
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from tag_hierarchy.core.config import settings
from tag_hierarchy.core.exceptions import TagNotFoundError
from tag_hierarchy.models.hierarchy_node import HierarchyNode
from tag_hierarchy.models.tag import TagRecord
from tag_hierarchy.services.count_aggregator import CountAggregator
from tag_hierarchy.services.expansion import ExpansionController
from tag_hierarchy.services.hierarchy_builder import HierarchyBuilder, HierarchyIssue
from tag_hierarchy.services.tag_search import TagSearchEngine
from tag_hierarchy.services.tag_sorting import SortKey, TagSortController

logger = logging.getLogger(__name__)

# Listener signature: (event_name, manager) -> None
HierarchyListener = Callable[[str, "HierarchyManager"], None]


class HierarchyManager:
    """Owns the tag forest and its id index.

    All mutation goes through this class. ``rebuild`` replaces every node,
    so node references obtained before a rebuild must not be reused; look
    nodes up again by tag id instead. Mutating calls are not thread-safe
    and must be serialised by the caller; read-only queries may run
    concurrently between mutations.
    """

    def __init__(
        self,
        builder: Optional[HierarchyBuilder] = None,
        aggregator: Optional[CountAggregator] = None,
        search_engine: Optional[TagSearchEngine] = None,
        expansion: Optional[ExpansionController] = None,
    ):
        self.builder = builder or HierarchyBuilder()
        self.aggregator = aggregator or CountAggregator()
        self.search_engine = search_engine or TagSearchEngine()
        self.expansion = expansion or ExpansionController()

        self._roots: List[HierarchyNode] = []
        self._index: Dict[str, HierarchyNode] = {}
        self._issues: List[HierarchyIssue] = []
        self._listeners: List[HierarchyListener] = []

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def roots(self) -> Tuple[HierarchyNode, ...]:
        return tuple(self._roots)

    @property
    def index_snapshot(self) -> Mapping[str, HierarchyNode]:
        """Read-only id -> node mapping of the current snapshot."""
        return MappingProxyType(self._index)

    @property
    def last_issues(self) -> Tuple[HierarchyIssue, ...]:
        return tuple(self._issues)

    @property
    def selected_node(self) -> Optional[HierarchyNode]:
        return next((node for node in self._index.values() if node.selected), None)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._index

    def iter_nodes(self) -> Iterator[HierarchyNode]:
        """Yield every node, roots first, depth-first pre-order."""
        return chain.from_iterable(chain([root], root.iter_descendants()) for root in list(self._roots))

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: HierarchyListener) -> None:
        """Register a callback invoked after each mutating operation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: HierarchyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as e:
                logger.error(f"Hierarchy listener failed on '{event}': {e}")

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def rebuild(self, records: Iterable[TagRecord], preserve_view_state: bool = False) -> List[HierarchyIssue]:
        """Replace the forest and index with ones built from records.

        The new forest is built completely before it is swapped in, so a
        failing build leaves the previous snapshot untouched.

        Args:
            records: Full flat snapshot of tag records
            preserve_view_state: Copy expanded/selected flags from the
                previous snapshot onto nodes with the same tag id

        Returns:
            Issues reported by the builder
        """
        result = self.builder.build(records)

        if preserve_view_state:
            for tag_id, node in result.index.items():
                previous = self._index.get(tag_id)
                if previous is not None:
                    node.expanded = previous.expanded
                    node.selected = previous.selected

        self._roots = result.roots
        self._index = result.index
        self._issues = result.issues

        self._notify("rebuilt")
        return list(result.issues)

    def clear(self) -> None:
        self._roots = []
        self._index = {}
        self._issues = []
        self._notify("cleared")

    def update_counts(self, direct_counts: Mapping[str, int]) -> Dict[str, int]:
        """Recompute direct and total document counts for every node."""
        totals = self.aggregator.update_counts(self._roots, self._index, direct_counts)
        self._notify("counts_updated")
        return totals

    def sort_all(self, key: Optional[SortKey] = None, reverse: bool = False) -> None:
        """Reorder roots and every sibling list (default: by display name)."""
        TagSortController(key=key, reverse=reverse).sort_tree(self._roots)
        self._notify("sorted")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_node(self, tag_id: str) -> Optional[HierarchyNode]:
        return self._index.get(tag_id)

    def get_node(self, tag_id: str) -> HierarchyNode:
        """Like find_node, but raises TagNotFoundError for unknown ids."""
        node = self._index.get(tag_id)
        if node is None:
            raise TagNotFoundError(tag_id)
        return node

    def search(self, query: Optional[str]) -> List[HierarchyNode]:
        """Roots whose subtree contains a match for query."""
        return self.search_engine.search(self._roots, query)

    def visible_ids(self, query: Optional[str]) -> Set[str]:
        return self.search_engine.visible_ids(self._roots, query)

    def filter_nodes(self, predicate: Callable[[HierarchyNode], bool]) -> List[HierarchyNode]:
        return [node for node in self._index.values() if predicate(node)]

    def nodes_by_type(self, tag_type: str) -> List[HierarchyNode]:
        return self.filter_nodes(lambda node: node.tag.type == tag_type)

    def parent_candidates(self, tag_id: Optional[str] = None) -> List[HierarchyNode]:
        """Nodes that may become the parent of tag_id, ordered by path.

        The tag itself and its descendants are excluded. With no tag_id
        every node is returned.
        """
        excluded = set()
        if tag_id is not None:
            node = self._index.get(tag_id)
            if node is not None:
                excluded.add(node.tag.id)
                excluded.update(descendant.tag.id for descendant in node.iter_descendants())
            else:
                excluded.add(tag_id)

        candidates = [node for node in self._index.values() if node.tag.id not in excluded]
        candidates.sort(key=lambda node: (node.path.casefold(), node.tag.id))
        return candidates

    def summary(self) -> Dict[str, Any]:
        """Counts describing the current snapshot."""
        return {
            "total_tags": len(self._index),
            "root_count": len(self._roots),
            "max_depth": max((node.level for node in self._index.values()), default=0),
            "issue_count": len(self._issues),
            "total_documents": sum(node.direct_count for node in self._index.values()),
        }

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def expand_to_level(self, max_level: Optional[int] = None) -> None:
        """Expand nodes above max_level (default: settings.DEFAULT_EXPAND_LEVEL)."""
        if max_level is None:
            max_level = settings.DEFAULT_EXPAND_LEVEL
        self.expansion.expand_to_level(self._roots, max_level)
        self._notify("expanded")

    def expand_all(self) -> None:
        self.expansion.expand_all(self._roots)
        self._notify("expanded")

    def collapse_roots(self) -> None:
        """Collapse the root nodes; deeper nodes keep their flags."""
        self.expansion.collapse_all(self._roots)
        self._notify("collapsed")

    def set_expanded(self, tag_id: str, expanded: bool = True) -> HierarchyNode:
        node = self.get_node(tag_id)
        node.expanded = expanded
        self._notify("expanded" if expanded else "collapsed")
        return node

    def select_node(self, tag_id: Optional[str], reveal: bool = False) -> Optional[HierarchyNode]:
        """Make tag_id the single selected node (None clears the selection).

        Args:
            tag_id: Tag to select
            reveal: Expand the node's ancestors so it is shown

        Raises:
            TagNotFoundError: If tag_id is not in the current snapshot
        """
        node = self.get_node(tag_id) if tag_id is not None else None

        for other in self._index.values():
            if other is not node and other.selected:
                other.selected = False
        if node is not None:
            node.selected = True
            if reveal:
                self.expansion.expand_path(node)

        self._notify("selected")
        return node
