"""SqlAlchemyQuery: tests for the Query Protocol adapter.

Tests cover:
    - where / where_in / order_by build working predicates
    - "= None" compiles to IS NULL
    - plain and qualified column names; unknown tables, columns and operators rejected
    - execute_first returns None on empty results
    - select(count(*)) returns scalars
"""

import pytest

from composite_relations.core.domain_types import COUNT_ALL
from composite_relations.core.errors import ConfigurationError
from composite_relations.infrastructure.sqlalchemy_query import SqlAlchemyQuery
from tests.infrastructure.models import Meter


def test_where_with_qualified_and_plain_columns(db, seeded):
    query = SqlAlchemyQuery(db, Meter).where("meters.region", "=", "A").where("site_code", "=", "1")
    assert sorted(m.serial for m in query.execute()) == ["m-1", "m-3"]


def test_where_in_and_order_by(db, seeded):
    query = SqlAlchemyQuery(db, Meter).where_in("region", ["B"]).order_by("id", descending=True)
    assert [m.serial for m in query.execute()] == ["m-5", "m-4"]


def test_where_none_is_null_check(db, seeded):
    db.add(Meter(id=9, region=None, site_code=None, serial="m-9"))
    db.flush()
    query = SqlAlchemyQuery(db, Meter).where("region", "=", None)
    assert [m.serial for m in query.execute()] == ["m-9"]
    assert "IS NULL" in str(query.statement)


def test_comparison_operators(db, seeded):
    query = SqlAlchemyQuery(db, Meter).where("id", ">=", 4).where("id", "!=", 5)
    assert [m.id for m in query.execute()] == [4]


def test_execute_first_none_when_empty(db, seeded):
    assert SqlAlchemyQuery(db, Meter).where("region", "=", "Z").execute_first() is None


def test_execute_first_returns_instance(db, seeded):
    first = SqlAlchemyQuery(db, Meter).order_by("id").execute_first()
    assert isinstance(first, Meter)
    assert first.id == 1


def test_select_count(db, seeded):
    query = SqlAlchemyQuery(db, Meter).where("region", "=", "A").select(COUNT_ALL)
    assert query.execute() == [3]


def test_unknown_column_rejected(db):
    with pytest.raises(ConfigurationError):
        SqlAlchemyQuery(db, Meter).where("colour", "=", "red")


def test_unknown_table_rejected(db):
    with pytest.raises(ConfigurationError):
        SqlAlchemyQuery(db, Meter).where_column("meters.region", "=", "nowhere.region")


def test_unknown_operator_rejected(db):
    with pytest.raises(ConfigurationError):
        SqlAlchemyQuery(db, Meter).where("region", "LIKE", "A%")
