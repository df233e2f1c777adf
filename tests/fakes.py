"""In-memory fakes for the Record / Query Protocols.

FakeQuery evaluates where / where_in predicates against a list of FakeRecords and
logs every call, so tests can assert both the predicates and the rows returned.
FakeRecord uses CompositeRelationsMixin, so the relationship factories run for real.
"""

from typing import Any, Iterable

from composite_relations.core.composite_key import plain_column
from composite_relations.relations.model import CompositeRelationsMixin


class FakeQuery:
    def __init__(self, rows: list):
        self.rows = rows
        self.calls: list[tuple] = []
        self.executions = 0
        self._predicates = []

    def where(self, column: str, operator: str, value: Any) -> "FakeQuery":
        self.calls.append(("where", column, operator, value))
        name = plain_column(column)
        self._predicates.append(lambda r: r.get_attribute(name) == value)
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> "FakeQuery":
        values = list(values)
        self.calls.append(("where_in", column, values))
        name = plain_column(column)
        self._predicates.append(lambda r: r.get_attribute(name) in values)
        return self

    def where_column(self, first: str, operator: str, second: str) -> "FakeQuery":
        self.calls.append(("where_column", first, operator, second))
        return self

    def select(self, expression: str) -> "FakeQuery":
        self.calls.append(("select", expression))
        return self

    def execute(self) -> list:
        self.executions += 1
        return [r for r in self.rows if all(p(r) for p in self._predicates)]

    def execute_first(self) -> Any:
        rows = self.execute()
        return rows[0] if rows else None


class FakeRecord(CompositeRelationsMixin):
    """Attribute bag backed by a class-level table store."""

    __tablename__ = "records"
    database: dict[str, list] = {}
    queries: list[FakeQuery] = []

    def __init__(self, **attributes):
        for name, value in attributes.items():
            setattr(self, name, value)
        self.saved: list[dict] = []

    def __repr__(self):
        attrs = {k: v for k, v in vars(self).items() if not k.startswith("_") and k != "saved"}
        return f"{type(self).__name__}({attrs})"

    def new_query_for(self, related: type) -> FakeQuery:
        query = FakeQuery(FakeRecord.database.get(related.get_table(), []))
        FakeRecord.queries.append(query)
        return query

    def update(self, attributes: dict[str, Any]) -> bool:
        for name, value in attributes.items():
            self.set_attribute(name, value)
        self.saved.append(dict(attributes))
        return True


class Site(FakeRecord):
    __tablename__ = "sites"

    def meter(self):
        return self.has_one_composite(Meter, ["region", "site_code"], ["region", "code"])

    def meters(self):
        return self.has_many_composite(Meter, ["region", "site_code"], ["region", "code"])

    def not_a_relation(self):
        return "nope"


class Meter(FakeRecord):
    __tablename__ = "meters"

    def site(self):
        return self.belongs_to_composite(
            Site, ["region", "site_code"], ["region", "code"], relation="site",
        )

    def lopsided(self):
        return self.belongs_to_composite(
            Site, ["region"], ["region", "code"], relation="lopsided",
        )
