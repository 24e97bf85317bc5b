"""Tests for TagRepository."""
import pytest
from sqlalchemy.orm import Session

from tag_hierarchy.core.exceptions import TagNotFoundError, TagStoreError, TagValidationError
from tag_hierarchy.db.models.document_tag import DocumentTag
from tag_hierarchy.models.tag import TagCreate
from tag_hierarchy.repositories.tag_repository import TagRepository
from tag_hierarchy.repositories.tag_store import TagStore


@pytest.fixture
def repository(db: Session) -> TagRepository:
    """Create a tag repository on the test database."""
    return TagRepository(db)


def test_implements_tag_store(repository: TagRepository) -> None:
    """Test that the repository satisfies the TagStore protocol."""
    assert isinstance(repository, TagStore)


def test_create_and_fetch(repository: TagRepository) -> None:
    """Test creating tags and reading the flat snapshot."""
    parent = repository.create_tag(TagCreate(name="ACME Corp", type="client", color="#007BFF"))
    child = repository.create_tag(
        TagCreate(name="Projet Alpha", parent_id=parent.id, metadata={"budget": 10})
    )

    records = repository.fetch_all_tags()

    assert {r.id for r in records} == {parent.id, child.id}
    stored_child = next(r for r in records if r.id == child.id)
    assert stored_child.parent_id == parent.id
    assert stored_child.slug == "projet-alpha"
    assert stored_child.metadata == {"budget": 10}
    assert stored_child.created_at is not None
    assert parent.display_color == "#007BFF"


def test_create_with_unknown_parent(repository: TagRepository) -> None:
    """Test that a missing parent is rejected."""
    with pytest.raises(TagValidationError):
        repository.create_tag(TagCreate(name="Orphan", parent_id="missing"))
    assert repository.fetch_all_tags() == []


def test_update_tag(repository: TagRepository) -> None:
    """Test replacing a tag's fields."""
    tag = repository.create_tag(TagCreate(name="Old"))
    other = repository.create_tag(TagCreate(name="Other"))

    updated = repository.update_tag(tag.id, TagCreate(name="New", parent_id=other.id))

    assert updated.id == tag.id
    assert updated.name == "New"
    assert updated.parent_id == other.id
    assert updated.updated_at is not None


def test_update_rejects_self_parent(repository: TagRepository) -> None:
    """Test that a tag cannot become its own parent."""
    tag = repository.create_tag(TagCreate(name="Loop"))

    with pytest.raises(TagValidationError):
        repository.update_tag(tag.id, TagCreate(name="Loop", parent_id=tag.id))


def test_update_unknown_tag(repository: TagRepository) -> None:
    """Test updating a tag that does not exist."""
    with pytest.raises(TagNotFoundError):
        repository.update_tag("missing", TagCreate(name="X"))


def test_delete_reroots_children(repository: TagRepository, db: Session) -> None:
    """Test that deleting a parent turns its children into roots."""
    parent = repository.create_tag(TagCreate(name="Parent"))
    child = repository.create_tag(TagCreate(name="Child", parent_id=parent.id))
    repository.associate("doc-1", parent.id)

    assert repository.delete_tag(parent.id) is True

    records = repository.fetch_all_tags()
    assert [r.id for r in records] == [child.id]
    assert records[0].parent_id is None
    assert db.query(DocumentTag).count() == 0


def test_delete_unknown_tag(repository: TagRepository) -> None:
    """Test deleting a tag that does not exist."""
    assert repository.delete_tag("missing") is False


def test_direct_counts(repository: TagRepository) -> None:
    """Test counting distinct documents per tag."""
    a = repository.create_tag(TagCreate(name="A"))
    b = repository.create_tag(TagCreate(name="B", parent_id=a.id))
    repository.associate("doc-1", a.id)
    repository.associate("doc-2", b.id)
    repository.associate("doc-3", b.id)
    repository.associate("doc-3", b.id)

    assert repository.fetch_direct_counts() == {a.id: 1, b.id: 2}


def test_associate_unknown_tag(repository: TagRepository) -> None:
    """Test attaching a document to a missing tag."""
    with pytest.raises(TagNotFoundError):
        repository.associate("doc-1", "missing")


def test_get_children(repository: TagRepository) -> None:
    """Test listing direct children."""
    parent = repository.create_tag(TagCreate(name="Parent"))
    repository.create_tag(TagCreate(name="C1", parent_id=parent.id))
    repository.create_tag(TagCreate(name="C2", parent_id=parent.id))

    assert sorted(t.name for t in repository.get_children(parent.id)) == ["C1", "C2"]


def test_associate_failure_rolls_back(repository: TagRepository) -> None:
    """Test that a rejected association leaves the session usable."""
    tag = repository.create_tag(TagCreate(name="A"))

    with pytest.raises(TagStoreError):
        repository.associate(None, tag.id)

    repository.associate("doc-1", tag.id)
    assert repository.fetch_direct_counts() == {tag.id: 1}
