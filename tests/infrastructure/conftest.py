"""Infrastructure test fixtures: in-memory SQLite through DatabaseSessionManager.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the test models created
    - `db` yields a session from the manager, so rollback/error mapping is exercised
"""

import pytest

from composite_relations.db.base import Base
from composite_relations.infrastructure.database import DatabaseSessionManager
from tests.infrastructure.models import Meter, Site


@pytest.fixture
def db_manager():
    manager = DatabaseSessionManager("sqlite://")
    Base.metadata.create_all(manager.engine)
    yield manager
    Base.metadata.drop_all(manager.engine)
    manager.dispose()


@pytest.fixture
def db(db_manager):
    with db_manager.session() as session:
        yield session


@pytest.fixture
def seeded(db):
    """Three sites and five meters, inserted in id order."""
    sites = [
        Site(id=1, region="A", code="1", name="North"),
        Site(id=2, region="A", code="2", name="South"),
        Site(id=3, region="B", code="1", name="East"),
    ]
    meters = [
        Meter(id=1, region="A", site_code="1", serial="m-1"),
        Meter(id=2, region="A", site_code="9", serial="m-2"),
        Meter(id=3, region="A", site_code="1", serial="m-3"),
        Meter(id=4, region="B", site_code="1", serial="m-4"),
        Meter(id=5, region="B", site_code="2", serial="m-5"),
    ]
    db.add_all(sites + meters)
    db.commit()
    return {"sites": sites, "meters": meters}
