"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Hierarchy display
    PATH_SEPARATOR: str = " > "
    DEFAULT_TAG_COLOR: str = "#6C757D"
    DEFAULT_TAG_TYPE: str = "custom"
    DEFAULT_EXPAND_LEVEL: int = 1

    # Search box placeholder text, treated as an empty query
    SEARCH_PLACEHOLDER: str = ""

    # Database
    DATABASE_URL: str = "sqlite:///./tags.db"
    SQL_ECHO: bool = False

    # Remote tag store (TextLab API)
    TAG_STORE_BASE_URL: str = "http://localhost:8000"
    TAG_STORE_API_TOKEN: str = ""
    TAG_STORE_TIMEOUT: float = 30.0


settings = Settings()
