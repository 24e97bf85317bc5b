"""Interface of the tag store feeding the hierarchy engine."""
from typing import Dict, List, Protocol, runtime_checkable

from tag_hierarchy.models.tag import TagCreate, TagRecord


@runtime_checkable
class TagStore(Protocol):
    """Source of tag snapshots and target of tag mutations.

    After a successful create/update/delete the caller rebuilds the whole
    hierarchy; stores never patch an existing tree.
    """

    def fetch_all_tags(self) -> List[TagRecord]:
        """Return the full flat snapshot of tags."""
        ...

    def fetch_direct_counts(self) -> Dict[str, int]:
        """Return tag id -> number of documents tagged directly."""
        ...

    def create_tag(self, payload: TagCreate) -> TagRecord:
        ...

    def update_tag(self, tag_id: str, payload: TagCreate) -> TagRecord:
        ...

    def delete_tag(self, tag_id: str) -> bool:
        ...
