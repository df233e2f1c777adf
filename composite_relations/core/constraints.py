"""Constraint Builder: translates composite key descriptors into query predicates.

Invariants:
    - Symmetry is validated BEFORE the first predicate is added (no half-constrained query)
    - apply_direct adds one equality predicate per column pair; a parent with any null
      key component gets a single [sentinel] IN list instead, so it matches nothing
      exactly as apply_eager would
    - apply_eager adds one IN predicate per column pair, values distinct, non-null,
      in first-seen order
    - An empty value set becomes [sentinel]: the query still runs and matches nothing

Design Decisions:
    - "local" always means the parent side and "foreign" the related side, so one
      builder serves both belongs-to and has-one/has-many directions
    - Per-column IN lists constrain a superset of the wanted rows (cross product of
      values); RelationMatcher discards the extra rows by full-token lookup
"""

import logging
from typing import Any, Iterable, Sequence

from composite_relations.core.boundary_protocols import Query, Record
from composite_relations.core.composite_key import CompositeKey, validate_symmetry
from composite_relations.core.domain_types import COUNT_ALL, EMPTY_KEY_SENTINEL
from composite_relations.core.errors import ConfigurationError, ErrorContext

logger = logging.getLogger(__name__)


class ConstraintBuilder:
    """Emits equality / IN / column-comparison predicates for composite keys."""

    def __init__(self, empty_sentinel: Any = EMPTY_KEY_SENTINEL):
        self.empty_sentinel = empty_sentinel

    def _checked(
        self,
        local_cols: "CompositeKey | Sequence[str]",
        foreign_cols: "CompositeKey | Sequence[str]",
    ) -> tuple[CompositeKey, CompositeKey]:
        try:
            validate_symmetry(
                local_cols, foreign_cols,
                ErrorContext(columns=[*local_cols, *foreign_cols]),
            )
        except ConfigurationError as e:
            logger.warning(e.message, extra={"error_code": e.code})
            raise
        return CompositeKey.of(local_cols), CompositeKey.of(foreign_cols)

    def apply_direct(
        self,
        query: Query,
        parent: Record,
        local_cols: "CompositeKey | Sequence[str]",
        foreign_cols: "CompositeKey | Sequence[str]",
    ) -> Query:
        """Constrain `query` to rows whose foreign columns equal the parent's local values."""
        local, foreign = self._checked(local_cols, foreign_cols)
        values = local.values_of(parent)
        if any(value is None for value in values):
            query.where_in(foreign[0], [self.empty_sentinel])
            return query
        for column, value in zip(foreign, values):
            query.where(column, "=", value)
        return query

    def apply_eager(
        self,
        query: Query,
        parents: Iterable[Record],
        local_cols: "CompositeKey | Sequence[str]",
        foreign_cols: "CompositeKey | Sequence[str]",
    ) -> Query:
        """Constrain `query` to rows matching any parent, one IN list per column."""
        local, foreign = self._checked(local_cols, foreign_cols)
        parents = list(parents)
        for local_column, foreign_column in zip(local.plain(), foreign):
            query.where_in(foreign_column, self.eager_keys(parents, local_column))
        return query

    def eager_keys(self, parents: Iterable[Record], column: str) -> list[Any]:
        """Distinct non-null values of `column` across parents, or [sentinel]."""
        keys = dict.fromkeys(
            value for value in (p.get_attribute(column) for p in parents)
            if value is not None
        )
        if not keys:
            return [self.empty_sentinel]
        return list(keys)

    def apply_count(
        self,
        query: Query,
        parent_table: str,
        local_cols: "CompositeKey | Sequence[str]",
        foreign_cols: "CompositeKey | Sequence[str]",
    ) -> Query:
        """Turn `query` into a correlated count of related rows per parent row."""
        local, foreign = self._checked(local_cols, foreign_cols)
        query.select(COUNT_ALL)
        for local_column, foreign_column in zip(local.qualified(parent_table), foreign):
            query.where_column(foreign_column, "=", local_column)
        return query
