"""Pytest configuration and fixtures."""
from typing import Callable, Generator, List, Optional

import pytest
from sqlalchemy.orm import Session, sessionmaker

from tag_hierarchy.core.database import Base, make_engine
from tag_hierarchy.db.models import DocumentTag, Tag  # noqa: F401
from tag_hierarchy.models.tag import TagRecord
from tag_hierarchy.services.hierarchy_manager import HierarchyManager


@pytest.fixture(scope="function")
def db(tmp_path) -> Generator[Session, None, None]:
    """Create a fresh SQLite database for each test."""
    engine = make_engine(f"sqlite:///{tmp_path / 'tags_test.db'}")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_tag() -> Callable[..., TagRecord]:
    """Factory for tag records with sensible defaults."""

    def _make_tag(
        id: str,
        name: Optional[str] = None,
        parent_id: Optional[str] = None,
        **fields,
    ) -> TagRecord:
        return TagRecord(
            id=id,
            name=name if name is not None else id,
            parent_id=parent_id,
            type=fields.pop("type", "custom"),
            **fields,
        )

    return _make_tag


@pytest.fixture
def chain_records(make_tag) -> List[TagRecord]:
    """Root > Child > Grandchild."""
    return [
        make_tag("1", "Root"),
        make_tag("2", "Child", parent_id="1"),
        make_tag("3", "Grandchild", parent_id="2"),
    ]


@pytest.fixture
def taxonomy_records(make_tag) -> List[TagRecord]:
    """A small client/technology taxonomy, deliberately out of order."""
    return [
        make_tag("proj-alpha", "Projet Alpha", parent_id="acme", description="Refonte du portail"),
        make_tag("tech", "Technologies", type="technology"),
        make_tag("acme", "ACME Corp", type="client"),
        make_tag("python", "Python", parent_id="tech", type="technology"),
        make_tag("react", "React", parent_id="tech", type="technology", description="Frontend library"),
        make_tag("proj-beta", "Projet Beta", parent_id="acme"),
        make_tag("status", "Status", type="status"),
        make_tag("done", "Done", parent_id="status", type="status"),
    ]


@pytest.fixture
def manager(taxonomy_records) -> HierarchyManager:
    """Manager built from the taxonomy records."""
    manager = HierarchyManager()
    manager.rebuild(taxonomy_records)
    return manager
