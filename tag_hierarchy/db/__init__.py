"""Database package."""
from tag_hierarchy.core.database import Base, SessionLocal, get_db

__all__ = ["Base", "SessionLocal", "get_db"]
