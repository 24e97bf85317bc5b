"""Roll-up document counts over the tag hierarchy."""
import logging
from typing import Dict, Iterable, Mapping

from tag_hierarchy.models.hierarchy_node import HierarchyNode

logger = logging.getLogger(__name__)


class CountAggregator:
    """Computes direct and total document counts for every node."""

    def update_counts(
        self,
        roots: Iterable[HierarchyNode],
        index: Mapping[str, HierarchyNode],
        direct_counts: Mapping[str, int],
    ) -> Dict[str, int]:
        """Assign direct counts and recompute totals bottom-up.

        Args:
            roots: Root nodes of the forest
            index: Mapping tag id -> node for every node in the forest
            direct_counts: Mapping tag id -> documents tagged directly.
                Ids with no matching node are ignored, missing ids count 0.

        Returns:
            Mapping tag id -> total count

        Raises:
            ValueError: If a count is negative or not an integer (no node
                is modified in that case)
        """
        for tag_id, count in direct_counts.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise ValueError(f"Invalid document count for tag '{tag_id}': {count!r}")

        for tag_id, node in index.items():
            node.direct_count = direct_counts.get(tag_id, 0)

        ignored = sum(1 for tag_id in direct_counts if tag_id not in index)
        if ignored:
            logger.debug(f"Ignored counts for {ignored} unknown tag ids")

        totals: Dict[str, int] = {}
        for root in roots:
            self._aggregate(root, totals)

        logger.info(
            f"Updated document counts for {len(index)} tags "
            f"({sum(node.direct_count for node in index.values())} direct associations)"
        )
        return totals

    @staticmethod
    def _aggregate(root: HierarchyNode, totals: Dict[str, int]) -> None:
        """Post-order total computation with an explicit stack."""
        stack = [(root, False)]
        while stack:
            node, children_done = stack.pop()
            if children_done:
                node.total_count = node.direct_count + sum(child.total_count for child in node.children)
                totals[node.tag.id] = node.total_count
            else:
                stack.append((node, True))
                stack.extend((child, False) for child in node.children)
