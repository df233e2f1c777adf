"""Boundary Protocols: contracts between the matching core and its collaborators.

Invariants:
    - Core NEVER imports a query builder or ORM, only these Protocols
    - Query methods that add predicates return the query (fluent) and mutate it in place
    - Record attribute access is by plain column name; tables qualify names only in queries

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes and SQLAlchemy models
      both satisfy it without inheriting from a library base
    - Sync methods: matching is pure and the only blocking call is Query.execute*
"""

from typing import Any, Iterable, Protocol


class Record(Protocol):
    """Structural contract for a row/model instance participating in a relation."""

    def get_attribute(self, name: str) -> Any: ...
    def set_attribute(self, name: str, value: Any) -> None: ...
    def get_relation(self, name: str) -> Any: ...
    def set_relation(self, name: str, value: Any) -> None: ...
    def relation_loaded(self, name: str) -> bool: ...
    def get_table(self) -> str: ...

    def update(self, attributes: dict[str, Any]) -> bool:
        """Merge attributes into the record and persist it."""
        ...


class Query(Protocol):
    """Contract for a filtered query over one related table."""

    def where(self, column: str, operator: str, value: Any) -> "Query": ...
    def where_in(self, column: str, values: Iterable[Any]) -> "Query": ...
    def where_column(self, first: str, operator: str, second: str) -> "Query": ...
    def select(self, expression: str) -> "Query": ...
    def execute(self) -> list: ...
    def execute_first(self) -> Any: ...


class RelationHost(Record, Protocol):
    """A record type that can open queries over other record types."""

    def new_query_for(self, related: type) -> Query: ...
