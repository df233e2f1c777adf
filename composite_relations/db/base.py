"""SQLAlchemy Declarative Base: ORM models that can declare composite relations.

Invariants:
    - All composite-relation models inherit from Base
    - Related queries run on the parent's own Session (object_session)
    - update() merges attributes and flushes; committing stays with the caller

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - Detached parents cannot open related queries: ConfigurationError, not a silent
      new session with different transaction state
"""

from typing import Any

from sqlalchemy.orm import DeclarativeBase, object_session

from composite_relations.core.errors import ConfigurationError, ErrorContext
from composite_relations.infrastructure.sqlalchemy_query import SqlAlchemyQuery
from composite_relations.relations.model import CompositeRelationsMixin


class Base(CompositeRelationsMixin, DeclarativeBase):
    """Base class for ORM models using composite-key relations."""

    def _session(self):
        session = object_session(self)
        if session is None:
            raise ConfigurationError(
                f"{type(self).__name__} is not attached to a session",
                ErrorContext(table=self.get_table()),
            )
        return session

    def new_query_for(self, related: type) -> SqlAlchemyQuery:
        return SqlAlchemyQuery(self._session(), related)

    def update(self, attributes: dict[str, Any]) -> bool:
        """Merge `attributes` into this row and flush it."""
        for name, value in attributes.items():
            self.set_attribute(name, value)
        self._session().flush()
        return True
