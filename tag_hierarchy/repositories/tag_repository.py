"""Tag repository backing the hierarchy with a SQL database."""
import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tag_hierarchy.core.exceptions import TagNotFoundError, TagStoreError, TagValidationError
from tag_hierarchy.db.models.document_tag import DocumentTag
from tag_hierarchy.db.models.tag import Tag
from tag_hierarchy.models.tag import TagCreate, TagRecord
from tag_hierarchy.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TagRepository(BaseRepository[Tag]):
    """Repository for Tag model implementing the TagStore interface."""

    def __init__(self, session: Session):
        """Initialize tag repository.

        Args:
            session: Database session
        """
        super().__init__(Tag, session)

    @staticmethod
    def to_record(tag: Tag) -> TagRecord:
        """Convert a Tag row into an immutable TagRecord."""
        return TagRecord(
            id=tag.id,
            name=tag.name,
            slug=tag.slug or "",
            type=tag.type or "",
            color=tag.color,
            icon=tag.icon,
            parent_id=tag.parent_id,
            description=tag.description,
            metadata=tag.tag_metadata,
            is_public=tag.is_public,
            is_system=tag.is_system,
            is_active=tag.is_active,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
        )

    def fetch_all_tags(self) -> List[TagRecord]:
        """Return every tag as a flat snapshot, ordered by creation."""
        result = self.session.execute(select(Tag).order_by(Tag.created_at, Tag.id))
        records = [self.to_record(tag) for tag in result.scalars().all()]
        logger.info(f"Fetched {len(records)} tags from database")
        return records

    def fetch_direct_counts(self) -> Dict[str, int]:
        """Count distinct documents attached directly to each tag.

        Returns:
            Dict mapping tag_id -> document count (tags without documents
            are omitted)
        """
        result = self.session.execute(
            select(DocumentTag.tag_id, func.count(func.distinct(DocumentTag.document_id))).group_by(
                DocumentTag.tag_id
            )
        )
        return {tag_id: count for tag_id, count in result.all()}

    def get_children(self, parent_tag_id: str) -> List[Tag]:
        """Get all direct child tags of a parent.

        Args:
            parent_tag_id: Parent tag ID

        Returns:
            List of child Tag instances
        """
        result = self.session.execute(select(Tag).filter(Tag.parent_id == parent_tag_id))
        return list(result.scalars().all())

    def _check_parent(self, parent_id: Optional[str], tag_id: Optional[str] = None) -> None:
        if parent_id is None:
            return
        if tag_id is not None and parent_id == tag_id:
            raise TagValidationError(f"Tag '{tag_id}' cannot be its own parent")
        if self.get_by_id(parent_id) is None:
            raise TagValidationError(f"Parent tag '{parent_id}' does not exist")

    @staticmethod
    def _apply_payload(tag: Tag, payload: TagCreate) -> None:
        tag.name = payload.name
        tag.slug = payload.slug or ""
        tag.type = payload.type
        tag.color = payload.color
        tag.icon = payload.icon
        tag.parent_id = payload.parent_id
        tag.description = payload.description
        tag.tag_metadata = payload.metadata
        tag.is_public = payload.is_public
        tag.is_system = payload.is_system
        tag.is_active = payload.is_active

    def create_tag(self, payload: TagCreate) -> TagRecord:
        """Insert a new tag.

        Args:
            payload: Validated tag fields

        Returns:
            The stored tag as a TagRecord

        Raises:
            TagValidationError: If the parent does not exist
            TagStoreError: If the database rejects the write
        """
        self._check_parent(payload.parent_id)

        tag = Tag()
        self._apply_payload(tag, payload)
        try:
            self.create(tag)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to create tag '{payload.name}': {e}")
            raise TagStoreError(f"Failed to create tag '{payload.name}'") from e

        logger.info(f"Created tag '{tag.name}' ({tag.id})")
        return self.to_record(tag)

    def update_tag(self, tag_id: str, payload: TagCreate) -> TagRecord:
        """Replace the fields of an existing tag.

        Raises:
            TagNotFoundError: If tag_id does not exist
            TagValidationError: If the new parent is invalid
            TagStoreError: If the database rejects the write
        """
        tag = self.get_by_id(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        self._check_parent(payload.parent_id, tag_id)

        self._apply_payload(tag, payload)
        try:
            self.session.flush()
            self.session.commit()
            self.session.refresh(tag)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to update tag '{tag_id}': {e}")
            raise TagStoreError(f"Failed to update tag '{tag_id}'") from e

        logger.info(f"Updated tag '{tag.name}' ({tag.id})")
        return self.to_record(tag)

    def delete_tag(self, tag_id: str) -> bool:
        """Delete a tag and its document associations.

        Children of the deleted tag become roots.

        Returns:
            True if the tag was deleted, False if it did not exist
        """
        tag = self.get_by_id(tag_id)
        if tag is None:
            logger.warning(f"Cannot delete unknown tag '{tag_id}'")
            return False

        try:
            self.session.execute(update(Tag).where(Tag.parent_id == tag_id).values(parent_id=None))
            self.delete(tag)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to delete tag '{tag_id}': {e}")
            raise TagStoreError(f"Failed to delete tag '{tag_id}'") from e

        logger.info(f"Deleted tag '{tag_id}'")
        return True

    def associate(
        self, document_id: str, tag_id: str, weight: float = 1.0, source: str = "manual"
    ) -> DocumentTag:
        """Attach a document to a tag (idempotent).

        Raises:
            TagNotFoundError: If tag_id does not exist
            TagStoreError: If the database rejects the write
        """
        if self.get_by_id(tag_id) is None:
            raise TagNotFoundError(tag_id)

        existing = self.session.execute(
            select(DocumentTag).filter(DocumentTag.document_id == document_id, DocumentTag.tag_id == tag_id)
        ).scalar_one_or_none()
        if existing is not None:
            return existing

        association = DocumentTag(document_id=document_id, tag_id=tag_id, weight=weight, source=source)
        try:
            self.session.add(association)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to attach document '{document_id}' to tag '{tag_id}': {e}")
            raise TagStoreError(f"Failed to attach document '{document_id}' to tag '{tag_id}'") from e
        return association
