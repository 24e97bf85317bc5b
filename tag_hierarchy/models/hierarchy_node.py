"""Tree node wrapping a tag record with navigation and view state."""
from itertools import chain
from typing import Any, Callable, Dict, Iterator, List, Optional

from tag_hierarchy.core.config import settings
from tag_hierarchy.models.tag import TagRecord

# Observer signature: (node, property_name) -> None
NodeObserver = Callable[["HierarchyNode", str], None]

FOLDER_OPEN_ICON = "📂"
FOLDER_CLOSED_ICON = "📁"


class HierarchyNode:
    """One tag's position in the hierarchy.

    Nodes live in an arena, an ``id -> node`` dict shared by every node of
    the same forest, which holds them strongly. The parent link is only the
    parent's tag id, resolved through the arena, so a node kept on its own
    still reaches its ancestors. ``level`` and ``path`` are computed from
    the live parent chain on every read, so they can never go stale after
    the node is moved.
    """

    def __init__(self, tag: TagRecord, arena: Optional[Dict[str, "HierarchyNode"]] = None):
        """Create a node and register it in arena.

        Args:
            tag: Tag record wrapped by the node
            arena: Shared id -> node mapping of the forest (a private one by
                default). An existing entry with the same id is replaced.
        """
        self.tag = tag
        self.children: List["HierarchyNode"] = []
        self.direct_count = 0
        self.total_count = 0
        self._parent_id: Optional[str] = None
        self._arena: Dict[str, "HierarchyNode"] = arena if arena is not None else {}
        self._arena[tag.id] = self
        self._expanded = False
        self._selected = False
        self._observers: List[NodeObserver] = []

    def __repr__(self) -> str:
        return f"HierarchyNode(id={self.tag.id!r}, name={self.tag.display_name!r}, level={self.level})"

    @property
    def tag_id(self) -> str:
        return self.tag.id

    @property
    def parent(self) -> Optional["HierarchyNode"]:
        if self._parent_id is None:
            return None
        return self._arena.get(self._parent_id)

    @property
    def level(self) -> int:
        """Depth in the tree (0 for roots)."""
        return sum(1 for _ in self.ancestors())

    @property
    def path(self) -> str:
        """Display names from the root down to this node."""
        names = [node.tag.display_name for node in self.ancestors()]
        names.reverse()
        names.append(self.tag.display_name)
        return settings.PATH_SEPARATOR.join(names)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def label(self) -> str:
        """Display name with document counters, e.g. ``"ACME (2) [7 total]"``."""
        direct_text = f" ({self.direct_count})" if self.direct_count > 0 else ""
        total_text = f" [{self.total_count} total]" if self.total_count > self.direct_count else ""
        return f"{self.tag.display_name}{direct_text}{total_text}"

    @property
    def display_icon(self) -> str:
        if self.has_children:
            return FOLDER_OPEN_ICON if self.expanded else FOLDER_CLOSED_ICON
        return self.tag.display_icon

    @property
    def display_color(self) -> str:
        return self.tag.display_color

    @property
    def expanded(self) -> bool:
        return self._expanded

    @expanded.setter
    def expanded(self, value: bool) -> None:
        if self._expanded != value:
            self._expanded = value
            self._notify("expanded")

    @property
    def selected(self) -> bool:
        return self._selected

    @selected.setter
    def selected(self, value: bool) -> None:
        if self._selected != value:
            self._selected = value
            self._notify("selected")

    def add_observer(self, observer: NodeObserver) -> None:
        """Register a callback for view-state changes on this node."""
        self._observers.append(observer)

    def remove_observer(self, observer: NodeObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, property_name: str) -> None:
        for observer in list(self._observers):
            observer(self, property_name)

    def ancestors(self) -> Iterator["HierarchyNode"]:
        """Yield the parent, grandparent, ... up to the root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_ancestor_of(self, other: "HierarchyNode") -> bool:
        return any(node is self for node in other.ancestors())

    def add_child(self, node: "HierarchyNode") -> None:
        """Attach node as the last child of this node.

        Raises:
            ValueError: If node already has a parent, attaching it would make
                a node its own ancestor, or its subtree holds an id already
                used by another node of this arena
        """
        if node.parent is not None:
            raise ValueError(f"Node {node.tag_id!r} already has parent {node.parent.tag_id!r}")
        if node._arena is self._arena:
            if node is self or node.is_ancestor_of(self):
                raise ValueError(f"Attaching {node.tag_id!r} under {self.tag_id!r} would create a cycle")
        else:
            self._adopt_subtree(node)

        node._parent_id = self.tag.id
        self.children.append(node)

    def _adopt_subtree(self, node: "HierarchyNode") -> None:
        """Move node and its descendants from their arena into this one."""
        subtree = [node, *node.iter_descendants()]
        for member in subtree:
            existing = self._arena.get(member.tag.id)
            if existing is not None and existing is not member:
                raise ValueError(f"Tag id {member.tag.id!r} is already used in this hierarchy")

        for member in subtree:
            if member._arena.get(member.tag.id) is member:
                del member._arena[member.tag.id]
            member._arena = self._arena
            self._arena[member.tag.id] = member

    def remove_child(self, node: "HierarchyNode") -> None:
        """Detach node from this node's children.

        Raises:
            ValueError: If node is not a child of this node
        """
        for i, child in enumerate(self.children):
            if child is node:
                del self.children[i]
                node._parent_id = None
                return
        raise ValueError(f"Node {node.tag_id!r} is not a child of {self.tag_id!r}")

    def iter_descendants(self) -> Iterator["HierarchyNode"]:
        """Yield every node strictly below this one, depth-first pre-order.

        Uses an explicit stack; each call starts a fresh traversal.
        """
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_by_id(self, tag_id: str) -> Optional["HierarchyNode"]:
        """Depth-first search of this node and its descendants."""
        for node in chain([self], self.iter_descendants()):
            if node.tag.id == tag_id:
                return node
        return None

    def id_path(self) -> List[str]:
        """Tag ids from the root down to and including this node."""
        ids = [node.tag.id for node in self.ancestors()]
        ids.reverse()
        ids.append(self.tag.id)
        return ids

    def filter_children(self, predicate: Callable[["HierarchyNode"], bool]) -> List["HierarchyNode"]:
        return [child for child in self.children if predicate(child)]

    def sort_children(self, key: Callable[["HierarchyNode"], Any], reverse: bool = False) -> None:
        """Reorder children in place; membership is unchanged."""
        self.children.sort(key=key, reverse=reverse)
