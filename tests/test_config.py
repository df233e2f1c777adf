"""Configuration: verifies env-driven settings and their validators.

Tests:
    - defaults
    - COMPOSITE_ prefixed environment overrides
    - postgres:// URL normalisation
    - empty key delimiter rejected
    - log_format limited to json or text
"""

import pytest
from pydantic import ValidationError

from composite_relations.config import Settings, get_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("COMPOSITE_DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.key_delimiter == "+"
    assert settings.empty_key_sentinel == 0
    assert settings.database_url == "sqlite:///composite_relations.db"
    assert settings.log_format == "json"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("COMPOSITE_KEY_DELIMITER", "::")
    monkeypatch.setenv("COMPOSITE_LOG_LEVEL", "DEBUG")
    settings = get_settings()
    assert settings.key_delimiter == "::"
    assert settings.log_level == "DEBUG"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_postgres_url_normalised():
    settings = Settings(database_url="postgres://u:p@db:5432/app")
    assert settings.database_url == "postgresql://u:p@db:5432/app"


def test_empty_delimiter_rejected():
    with pytest.raises(ValidationError):
        Settings(key_delimiter="")


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(log_format="xml")
