"""Tag table with a self-referencing parent column."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from tag_hierarchy.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tag(Base):
    """Hierarchical tag; parent_id may be NULL for roots."""

    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, default="")
    type = Column(String(50), nullable=False, default="custom", index=True)
    color = Column(String(7))  # #RRGGBB
    icon = Column(String(32))
    parent_id = Column(String(36), ForeignKey("tags.id", ondelete="SET NULL"), index=True)
    description = Column(Text)
    # "metadata" is reserved on declarative classes
    tag_metadata = Column("metadata", JSON)
    is_public = Column(Boolean, nullable=False, default=True)
    is_system = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=_utcnow)

    # Relationships
    documents = relationship("DocumentTag", back_populates="tag", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_tags_slug", "slug"),)
