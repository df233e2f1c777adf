"""SQLAlchemy Query Adapter: implements the core Query Protocol over a select().

Invariants:
    - One adapter wraps one mapped class; predicates accumulate on an immutable Select
    - Column names may be plain or "table.column"; other tables resolve through the
      mapped class's MetaData (needed for correlated count queries)
    - Unknown columns or operators raise ConfigurationError before any SQL is issued
    - execute() returns ORM instances, or scalars once select(COUNT_ALL) replaced the columns

Design Decisions:
    - Operators map onto Python's operator module so SQLAlchemy builds the SQL
      (`col == None` becomes IS NULL, matching "= null" semantics of the key predicates)
"""

import operator as op
from typing import Any, Iterable

from sqlalchemy import ColumnElement, Select, func, literal_column, select
from sqlalchemy.orm import Session

from composite_relations.core.domain_types import COUNT_ALL
from composite_relations.core.errors import ConfigurationError, ErrorContext

_OPERATORS = {
    "=": op.eq,
    "==": op.eq,
    "!=": op.ne,
    "<>": op.ne,
    "<": op.lt,
    "<=": op.le,
    ">": op.gt,
    ">=": op.ge,
}


class SqlAlchemyQuery:
    """Fluent, session-bound query over one mapped class."""

    def __init__(self, session: Session, model: type):
        self.session = session
        self.model = model
        self.table = model.__table__
        self._statement: Select = select(model)

    @property
    def statement(self) -> Select:
        return self._statement

    def _column(self, name: str) -> ColumnElement:
        table_name, _, column_name = name.rpartition(".")
        table = self.table
        if table_name and table_name != self.table.name:
            table = self.table.metadata.tables.get(table_name)
            if table is None:
                raise ConfigurationError(
                    f"Unknown table '{table_name}' in column '{name}'",
                    ErrorContext(table=table_name, columns=[name]),
                )
        if column_name not in table.c:
            raise ConfigurationError(
                f"Unknown column '{column_name}' on table '{table.name}'",
                ErrorContext(table=table.name, columns=[name]),
            )
        return table.c[column_name]

    def _operator(self, operator: str):
        try:
            return _OPERATORS[operator]
        except KeyError:
            raise ConfigurationError(f"Unsupported operator '{operator}'") from None

    def where(self, column: str, operator: str, value: Any) -> "SqlAlchemyQuery":
        self._statement = self._statement.where(
            self._operator(operator)(self._column(column), value),
        )
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> "SqlAlchemyQuery":
        self._statement = self._statement.where(self._column(column).in_(list(values)))
        return self

    def where_column(self, first: str, operator: str, second: str) -> "SqlAlchemyQuery":
        self._statement = self._statement.where(
            self._operator(operator)(self._column(first), self._column(second)),
        )
        return self

    def select(self, expression: str) -> "SqlAlchemyQuery":
        column = func.count() if expression == COUNT_ALL else literal_column(expression)
        self._statement = self._statement.with_only_columns(column).select_from(self.table)
        return self

    def order_by(self, column: str, descending: bool = False) -> "SqlAlchemyQuery":
        col = self._column(column)
        self._statement = self._statement.order_by(col.desc() if descending else col)
        return self

    def execute(self) -> list:
        return list(self.session.scalars(self._statement).all())

    def execute_first(self) -> Any:
        return self.session.scalars(self._statement.limit(1)).first()

    def as_scalar_subquery(self):
        """Use the query (typically a count query) inside another statement."""
        return self._statement.scalar_subquery()
