"""Builds a validated tag forest from a flat list of tag records."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from tag_hierarchy.models.hierarchy_node import HierarchyNode
from tag_hierarchy.models.tag import TagRecord
from tag_hierarchy.services.tag_sorting import TagSortController

logger = logging.getLogger(__name__)

_VISITING = 1
_DONE = 2


class IssueKind(str, Enum):
    """Data-quality problems found while building a hierarchy."""

    DUPLICATE_IDENTITY = "duplicate_identity"
    DANGLING_PARENT_REFERENCE = "dangling_parent_reference"
    CYCLE_DETECTED = "cycle_detected"


@dataclass(frozen=True)
class HierarchyIssue:
    """A non-fatal problem reported by the builder."""

    kind: IssueKind
    tag_id: str
    related_id: Optional[str]
    message: str


@dataclass
class HierarchyBuildResult:
    """A fully linked forest plus its id index and the issues found."""

    roots: List[HierarchyNode]
    index: Dict[str, HierarchyNode]
    issues: List[HierarchyIssue] = field(default_factory=list)

    def issues_of(self, kind: IssueKind) -> List[HierarchyIssue]:
        return [issue for issue in self.issues if issue.kind == kind]


class HierarchyBuilder:
    """Two-pass builder turning parent-referencing records into a forest.

    Malformed input never aborts a build: duplicate ids resolve to the last
    record seen, and nodes with a dangling or cyclic parent reference are
    demoted to roots. Each of these is reported as a HierarchyIssue.
    """

    def __init__(self, sorter: Optional[TagSortController] = None):
        """Initialize the builder.

        Args:
            sorter: Controller used to order the root list (default: by name)
        """
        self.sorter = sorter or TagSortController()

    def build(self, records: Iterable[TagRecord]) -> HierarchyBuildResult:
        """Build a forest from tag records in any order.

        Args:
            records: Flat snapshot of tag records

        Returns:
            HierarchyBuildResult with sorted roots, id index and issues
        """
        issues: List[HierarchyIssue] = []

        # Pass 1: one node per record, last write wins on duplicate ids.
        # The index is also the arena the nodes resolve their parents through.
        index: Dict[str, HierarchyNode] = {}
        for record in records:
            if record.id in index:
                issues.append(
                    HierarchyIssue(
                        kind=IssueKind.DUPLICATE_IDENTITY,
                        tag_id=record.id,
                        related_id=None,
                        message=f"Duplicate tag id '{record.id}': keeping the last record ('{record.display_name}')",
                    )
                )
            HierarchyNode(record, arena=index)

        # Pass 2: link children to parents
        cycle_members = self._find_cycle_members(index)
        roots: List[HierarchyNode] = []

        for tag_id, node in index.items():
            parent_id = node.tag.parent_id
            if not parent_id:
                roots.append(node)
                continue

            if tag_id in cycle_members:
                issues.append(
                    HierarchyIssue(
                        kind=IssueKind.CYCLE_DETECTED,
                        tag_id=tag_id,
                        related_id=parent_id,
                        message=f"Tag '{tag_id}' is part of a parent cycle through '{parent_id}': treated as root",
                    )
                )
                roots.append(node)
                continue

            parent = index.get(parent_id)
            if parent is None:
                issues.append(
                    HierarchyIssue(
                        kind=IssueKind.DANGLING_PARENT_REFERENCE,
                        tag_id=tag_id,
                        related_id=parent_id,
                        message=f"Tag '{tag_id}' references unknown parent '{parent_id}': treated as root",
                    )
                )
                roots.append(node)
                continue

            parent.add_child(node)

        self.sorter.sort_siblings(roots)

        for issue in issues:
            logger.warning(issue.message)
        logger.info(f"Built hierarchy: {len(index)} tags, {len(roots)} roots, {len(issues)} issues")

        return HierarchyBuildResult(roots=roots, index=index, issues=issues)

    @staticmethod
    def _find_cycle_members(index: Dict[str, HierarchyNode]) -> Set[str]:
        """Return the ids of every tag that lies on a parent_id cycle.

        Each tag has at most one parent, so walking parent links from any
        start either ends at a root, joins an already explored chain, or
        comes back to a tag on the current walk (a cycle).
        """
        state: Dict[str, int] = {}
        members: Set[str] = set()

        for start in index:
            if start in state:
                continue

            path: List[str] = []
            position: Dict[str, int] = {}
            current: Optional[str] = start
            while current is not None and current not in state:
                state[current] = _VISITING
                position[current] = len(path)
                path.append(current)
                parent_id = index[current].tag.parent_id
                current = parent_id if parent_id in index else None

            if current is not None and state[current] == _VISITING:
                members.update(path[position[current]:])

            for tag_id in path:
                state[tag_id] = _DONE

        return members
