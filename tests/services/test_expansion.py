"""Tests for ExpansionController."""
import pytest

from tag_hierarchy.services.expansion import ExpansionController
from tag_hierarchy.services.hierarchy_builder import HierarchyBuilder


@pytest.fixture
def chain(chain_records):
    """Built Root > Child > Grandchild hierarchy."""
    return HierarchyBuilder().build(chain_records)


def expanded_ids(index):
    return sorted(tag_id for tag_id, node in index.items() if node.expanded)


class TestExpandToLevel:
    """Test bulk expansion."""

    def test_level_one_expands_only_root(self, chain) -> None:
        """Test expand_to_level(1) on a 3-level tree."""
        ExpansionController().expand_to_level(chain.roots, 1)

        assert expanded_ids(chain.index) == ["1"]

    def test_level_two(self, chain) -> None:
        """Test expansion down to the second level."""
        ExpansionController().expand_to_level(chain.roots, 2)

        assert expanded_ids(chain.index) == ["1", "2"]

    def test_does_not_close_deeper_nodes(self, chain) -> None:
        """Test that nodes beyond the level keep their state."""
        chain.index["3"].expanded = True
        ExpansionController().expand_to_level(chain.roots, 1)

        assert expanded_ids(chain.index) == ["1", "3"]

    def test_level_zero_is_noop(self, chain) -> None:
        """Test that level 0 expands nothing."""
        assert ExpansionController().expand_to_level(chain.roots, 0) == 0
        assert expanded_ids(chain.index) == []

    def test_expand_all(self, taxonomy_records) -> None:
        """Test expanding every node."""
        result = HierarchyBuilder().build(taxonomy_records)
        ExpansionController().expand_all(result.roots)

        assert all(n.expanded for n in result.index.values())


class TestCollapse:
    """Test collapsing and path expansion."""

    def test_collapse_only_touches_roots(self, chain) -> None:
        """Test that collapse_all leaves descendants untouched."""
        controller = ExpansionController()
        controller.expand_all(chain.roots)
        controller.collapse_all(chain.roots)

        assert expanded_ids(chain.index) == ["2", "3"]

    def test_expand_path(self, chain) -> None:
        """Test expanding the ancestors of a node."""
        ExpansionController().expand_path(chain.index["3"])

        assert expanded_ids(chain.index) == ["1", "2"]
