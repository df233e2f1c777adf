"""Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with a COMPOSITE_-prefixed environment variable
    - get_settings() is cached (lru_cache): single instance per process
    - key_delimiter is never empty

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: works out-of-the-box with a local SQLite file
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="COMPOSITE_", case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite:///composite_relations.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Heroku-style postgres:// URLs are not accepted by SQLAlchemy 2.x."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_echo: bool = False

    # Matching
    key_delimiter: str = "+"
    empty_key_sentinel: int | str = 0

    @field_validator("key_delimiter")
    @classmethod
    def delimiter_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("key_delimiter must not be empty")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
