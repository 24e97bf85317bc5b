"""Tag record and tag payload schemas."""
import re
import unicodedata
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tag_hierarchy.core.config import settings

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

TAG_TYPES = ("client", "technology", "status", "category", "priority", "custom")

DEFAULT_TYPE_ICONS = {
    "client": "🏢",
    "technology": "⚙️",
    "status": "📊",
    "category": "📂",
    "priority": "⭐",
    "custom": "🏷️",
}
FALLBACK_ICON = "🏷️"


def generate_slug(name: str) -> str:
    """Build a url-safe slug from a display name.

    Lowercases, turns spaces into dashes, folds accented characters to
    their ASCII base letter and drops anything that is not a word
    character or a dash.

    Args:
        name: Display name

    Returns:
        Slug string (empty for a blank name)
    """
    if not name or not name.strip():
        return ""

    decomposed = unicodedata.normalize("NFKD", name.strip().lower())
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"[^\w\-]", "", folded.replace(" ", "-"))


def is_valid_hex_color(color: Optional[str]) -> bool:
    """Return True if color is a #RRGGBB hex string."""
    return bool(color) and HEX_COLOR_PATTERN.match(color) is not None


class TagRecord(BaseModel):
    """One taxonomy entry as served by the tag store.

    Records are immutable for the lifetime of a hierarchy snapshot; a change
    in the store produces a new record and a full rebuild.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    slug: str = ""
    type: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    is_public: bool = True
    is_system: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("name", "slug", "type", mode="before")
    @classmethod
    def _null_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("parent_id", mode="before")
    @classmethod
    def _blank_parent_is_root(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def display_name(self) -> str:
        """Name if non-empty, else slug."""
        return self.name if self.name else self.slug

    @property
    def display_color(self) -> str:
        return self.color if self.color else settings.DEFAULT_TAG_COLOR

    @property
    def display_icon(self) -> str:
        if self.icon:
            return self.icon
        return DEFAULT_TYPE_ICONS.get((self.type or "").lower(), FALLBACK_ICON)


class TagCreate(BaseModel):
    """Payload for creating or replacing a tag in the store."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    type: str = Field(default_factory=lambda: settings.DEFAULT_TAG_TYPE)
    color: Optional[str] = None
    icon: Optional[str] = None
    parent_id: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    is_public: bool = True
    is_system: bool = False
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Tag name is required")
        return value

    @field_validator("slug", "color", "icon", "parent_id", "description", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("color")
    @classmethod
    def _color_is_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_valid_hex_color(value):
            raise ValueError("Color must use the #RRGGBB format")
        return value

    @model_validator(mode="after")
    def _fill_defaults(self) -> "TagCreate":
        if not self.slug:
            self.slug = generate_slug(self.name)
        if not self.type.strip():
            self.type = settings.DEFAULT_TAG_TYPE
        return self
