"""Tests for tag records and payloads."""
import pytest
from pydantic import ValidationError

from tag_hierarchy.models.tag import TagCreate, TagRecord, generate_slug, is_valid_hex_color


class TestTagRecord:
    """Test the immutable tag record."""

    def test_parses_store_json(self) -> None:
        """Test parsing a record in the store's snake_case format."""
        record = TagRecord.model_validate(
            {
                "id": "t1",
                "name": "ACME Corp",
                "slug": "acme-corp",
                "type": "client",
                "parent_id": "root",
                "metadata": {"erp_code": 42},
                "is_public": False,
                "created_at": "2024-05-01T10:00:00Z",
            }
        )

        assert record.parent_id == "root"
        assert record.metadata == {"erp_code": 42}
        assert record.is_public is False
        assert record.is_active is True
        assert record.created_at.year == 2024

    def test_blank_parent_means_root(self) -> None:
        """Test that an empty parent id is normalised to None."""
        assert TagRecord(id="t1", parent_id="").parent_id is None
        assert TagRecord(id="t1", parent_id="   ").parent_id is None

    def test_id_required(self) -> None:
        """Test that an empty id is rejected."""
        with pytest.raises(ValidationError):
            TagRecord(id="")

    def test_is_frozen(self) -> None:
        """Test that records cannot be modified in place."""
        record = TagRecord(id="t1", name="A")
        with pytest.raises(ValidationError):
            record.name = "B"

    def test_display_name_falls_back_to_slug(self) -> None:
        """Test display name fallback."""
        assert TagRecord(id="t1", name="Named", slug="slug").display_name == "Named"
        assert TagRecord(id="t1", name="", slug="slug-only").display_name == "slug-only"

    def test_display_color_default(self) -> None:
        """Test the default grey color."""
        assert TagRecord(id="t1").display_color == "#6C757D"
        assert TagRecord(id="t1", color="#FF0000").display_color == "#FF0000"

    @pytest.mark.parametrize(
        "tag_type,icon",
        [("client", "🏢"), ("TECHNOLOGY", "⚙️"), ("priority", "⭐"), ("unknown", "🏷️"), ("", "🏷️")],
    )
    def test_display_icon_by_type(self, tag_type: str, icon: str) -> None:
        """Test the per-type default icon."""
        assert TagRecord(id="t1", type=tag_type).display_icon == icon

    def test_explicit_icon_wins(self) -> None:
        """Test that an explicit icon overrides the type default."""
        assert TagRecord(id="t1", type="client", icon="🚀").display_icon == "🚀"


class TestTagCreate:
    """Test tag payload validation."""

    def test_slug_generated_from_name(self) -> None:
        """Test slug generation when no slug is given."""
        payload = TagCreate(name="  Projet Été ")

        assert payload.name == "Projet Été"
        assert payload.slug == "projet-ete"
        assert payload.type == "custom"

    def test_explicit_slug_kept(self) -> None:
        """Test that an explicit slug is not overwritten."""
        assert TagCreate(name="ACME", slug="acme-corp").slug == "acme-corp"

    def test_blank_name_rejected(self) -> None:
        """Test that a blank name is rejected."""
        with pytest.raises(ValidationError):
            TagCreate(name="   ")

    def test_invalid_color_rejected(self) -> None:
        """Test color format validation."""
        with pytest.raises(ValidationError):
            TagCreate(name="A", color="red")

    def test_blank_optionals_become_none(self) -> None:
        """Test normalisation of blank optional fields."""
        payload = TagCreate(name="A", color=" ", parent_id="", description="")

        assert payload.color is None
        assert payload.parent_id is None
        assert payload.description is None


def test_generate_slug() -> None:
    """Test slug generation rules."""
    assert generate_slug("Vue.js Projects") == "vuejs-projects"
    assert generate_slug("Façade à gérer") == "facade-a-gerer"
    assert generate_slug("   ") == ""


def test_is_valid_hex_color() -> None:
    """Test hex color validation."""
    assert is_valid_hex_color("#1a2B3c")
    assert not is_valid_hex_color("#12345")
    assert not is_valid_hex_color("123456")
    assert not is_valid_hex_color(None)
