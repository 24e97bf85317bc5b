"""Database configuration."""
import logging
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tag_hierarchy.core.config import settings

if settings.SQL_ECHO:
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

Base = declarative_base()


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine, enabling foreign keys on SQLite connections.

    Args:
        database_url: SQLAlchemy URL (defaults to settings.DATABASE_URL)

    Returns:
        Configured SQLAlchemy engine
    """
    url = database_url or settings.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, echo=settings.SQL_ECHO, connect_args=connect_args)

    if url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
