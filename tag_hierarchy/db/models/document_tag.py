"""Document-Tag association model."""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tag_hierarchy.core.database import Base


class DocumentTag(Base):
    """Association between an external document id and a tag."""

    __tablename__ = "document_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(String(255), nullable=False, index=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)
    weight = Column(Float, nullable=False, default=1.0)
    source = Column(String(20), nullable=False, default="manual")  # manual, auto, imported, suggested
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    # Relationships
    tag = relationship("Tag", back_populates="documents")

    __table_args__ = (UniqueConstraint("document_id", "tag_id", name="uq_document_tag"),)
