"""Composite Relation Base: shared state machine for all composite relation variants.

Invariants:
    - parent_key columns live on the parent record, related_key columns on the related table
    - Key symmetry is validated at construction, before any query exists to run
    - Phase moves UNCONSTRAINED -> CONSTRAINED exactly once; a second constraint call
      raises ConfigurationError
    - Results are only read from a CONSTRAINED relation (never an unfiltered table scan)
    - Constraint suppression (no_constraints) is per-context, never process-global

Design Decisions:
    - ContextVar for the "constraints disabled" switch: eager loading builds a bare
      relation from one parent while other threads/tasks keep normal behaviour
    - ReadOnlyRelation is a separate capability class: writes fail loudly with
      RelationNotImplementedError instead of being dropped
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Sequence

from composite_relations.core.boundary_protocols import Query, Record
from composite_relations.core.composite_key import CompositeKey, validate_symmetry
from composite_relations.core.constraints import ConstraintBuilder
from composite_relations.core.domain_types import Cardinality, RelationPhase
from composite_relations.core.errors import (
    ConfigurationError, ErrorContext, RelationNotImplementedError,
)
from composite_relations.core.matching import RelationMatcher

logger = logging.getLogger(__name__)

_constraints_enabled: ContextVar[bool] = ContextVar(
    "composite_relation_constraints", default=True,
)


@contextmanager
def no_constraints() -> Iterator[None]:
    """Build relations without base constraints (used by eager loading)."""
    token = _constraints_enabled.set(False)
    try:
        yield
    finally:
        _constraints_enabled.reset(token)


def constraints_enabled() -> bool:
    return _constraints_enabled.get()


class CompositeRelation(ABC):
    """A relation between one parent record and a related table over a composite key."""

    cardinality: Cardinality

    def __init__(
        self,
        query: Query,
        parent: Record,
        related: Any,
        parent_key: "CompositeKey | Sequence[str]",
        related_key: "CompositeKey | Sequence[str]",
        relation_name: str | None = None,
        builder: ConstraintBuilder | None = None,
        matcher: RelationMatcher | None = None,
    ):
        self.related_table = related.get_table()
        validate_symmetry(
            CompositeKey.of(parent_key), CompositeKey.of(related_key),
            ErrorContext(relation=relation_name, table=self.related_table),
        )
        self._query = query
        self.parent = parent
        self.related = related
        self.parent_key = CompositeKey.of(parent_key).plain()
        self.related_key = CompositeKey.of(related_key).plain()
        self.relation_name = relation_name
        self.builder = builder or ConstraintBuilder()
        self.matcher = matcher or RelationMatcher()
        self.phase = RelationPhase.UNCONSTRAINED

    @property
    def query(self) -> Query:
        """The underlying related query (e.g. to add ordering before execution)."""
        return self._query

    # ─── Keys ────────────────────────────────────────────────────

    @property
    def qualified_related_key(self) -> CompositeKey:
        return self.related_key.qualified(self.related_table)

    @property
    def qualified_parent_key(self) -> CompositeKey:
        return self.parent_key.qualified(self.parent.get_table())

    # ─── Constraints ─────────────────────────────────────────────

    def _context(self) -> ErrorContext:
        return ErrorContext(
            relation=self.relation_name,
            table=self.related_table,
            columns=list(self.related_key),
        )

    def _begin_constraining(self, operation: str) -> None:
        if self.phase is RelationPhase.CONSTRAINED:
            raise ConfigurationError(
                f"{operation}() called on an already constrained "
                f"{self.cardinality.value} relation to '{self.related_table}'",
                self._context(),
            )

    def add_constraints(self) -> None:
        """Constrain the related query to the single parent's key values."""
        self._begin_constraining("add_constraints")
        self.builder.apply_direct(
            self._query, self.parent, self.parent_key, self.qualified_related_key,
        )
        self.phase = RelationPhase.CONSTRAINED

    def add_eager_constraints(self, parents: Sequence[Record]) -> None:
        """Constrain the related query to rows that can match any of `parents`."""
        self._begin_constraining("add_eager_constraints")
        self.builder.apply_eager(
            self._query, parents, self.parent_key, self.qualified_related_key,
        )
        self.phase = RelationPhase.CONSTRAINED
        logger.debug(
            f"Eager constraints applied for {len(parents)} parent(s)",
            extra={"table": self.related_table, "parents": len(parents)},
        )

    def get_relation_count_query(
        self, query: Query, parent_table: str | None = None,
    ) -> Query:
        """Correlated count(*) of related rows for a "has related" filter on parents."""
        return self.builder.apply_count(
            query,
            parent_table or self.parent.get_table(),
            self.parent_key,
            self.qualified_related_key,
        )

    # ─── Results ─────────────────────────────────────────────────

    def _require_constrained(self) -> None:
        if self.phase is not RelationPhase.CONSTRAINED:
            raise ConfigurationError(
                f"Cannot read results of an unconstrained relation to '{self.related_table}'",
                self._context(),
            )

    def get_eager(self) -> list:
        """Execute the (eager-)constrained query and return every row."""
        self._require_constrained()
        return list(self._query.execute())

    @abstractmethod
    def get_results(self) -> Any:
        """Resolve the relation for the single parent."""

    @property
    def empty_value(self) -> Any:
        return [] if self.cardinality is Cardinality.HAS_MANY else None

    def init_relation(self, parents: Sequence[Record], relation_name: str) -> Sequence[Record]:
        return self.matcher.init_relation(parents, relation_name, self.empty_value)

    def match(
        self, parents: Sequence[Record], results: Sequence[Record], relation_name: str,
    ) -> Sequence[Record]:
        """Attach eagerly loaded `results` to their parents under `relation_name`."""
        dictionary = self.matcher.build_dictionary(results, self.related_key)
        if self.cardinality is Cardinality.HAS_MANY:
            return self.matcher.match_many(parents, dictionary, self.parent_key, relation_name)
        return self.matcher.match_one(parents, dictionary, self.parent_key, relation_name)


class ReadOnlyRelation:
    """Capability marker: relation exposes no write path over composite keys."""

    def _unsupported(self, operation: str):
        raise RelationNotImplementedError(
            operation, ErrorContext(table=getattr(self, "related_table", None)),
        )

    def save(self, record: Record):
        self._unsupported("save")

    def save_many(self, records: Sequence[Record]):
        self._unsupported("save_many")

    def create(self, attributes: dict):
        self._unsupported("create")

    def create_many(self, records: Sequence[dict]):
        self._unsupported("create_many")

    def update(self, attributes: dict):
        self._unsupported("update")
