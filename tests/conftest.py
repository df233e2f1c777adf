"""Root conftest: shared test configuration."""

import os

import pytest

from composite_relations.config import get_settings

# Ensure tests never touch a developer's database file
os.environ.setdefault("COMPOSITE_DATABASE_URL", "sqlite://")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are lru_cached; drop the cache so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_db():
    """Empty in-memory table store for FakeRecord-based models."""
    from tests.fakes import FakeRecord

    FakeRecord.database = {}
    FakeRecord.queries = []
    yield FakeRecord.database
    FakeRecord.database = {}
    FakeRecord.queries = []
