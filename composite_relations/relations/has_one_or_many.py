"""HasOneComposite / HasManyComposite: the related table stores the composite foreign key.

Invariants:
    - foreign_key columns live on the related table; local_key columns on the parent
    - Has-one attaches the first related row (or None); has-many attaches every row
      in fetch order (or [])
    - Both variants are read-only: save/create/update raise RelationNotImplementedError
"""

from typing import Any, Sequence

from composite_relations.core.boundary_protocols import Query, Record
from composite_relations.core.composite_key import CompositeKey
from composite_relations.core.constraints import ConstraintBuilder
from composite_relations.core.domain_types import Cardinality
from composite_relations.core.matching import RelationMatcher
from composite_relations.relations.base import CompositeRelation, ReadOnlyRelation


class HasOneOrManyComposite(ReadOnlyRelation, CompositeRelation):
    """Shared key direction for has-one and has-many."""

    def __init__(
        self,
        query: Query,
        parent: Record,
        related: Any,
        foreign_key: "CompositeKey | Sequence[str]",
        local_key: "CompositeKey | Sequence[str]",
        relation: str | None = None,
        builder: ConstraintBuilder | None = None,
        matcher: RelationMatcher | None = None,
    ):
        super().__init__(
            query, parent, related, local_key, foreign_key,
            relation_name=relation, builder=builder, matcher=matcher,
        )

    @property
    def foreign_key(self) -> CompositeKey:
        return self.related_key

    @property
    def local_key(self) -> CompositeKey:
        return self.parent_key

    def get_parent_key(self) -> list[Any]:
        """The parent's values at the local key columns."""
        return self.local_key.values_of(self.parent)


class HasOneComposite(HasOneOrManyComposite):
    cardinality = Cardinality.HAS_ONE

    def get_results(self) -> Record | None:
        self._require_constrained()
        return self._query.execute_first()


class HasManyComposite(HasOneOrManyComposite):
    cardinality = Cardinality.HAS_MANY

    def get_results(self) -> list:
        self._require_constrained()
        return list(self._query.execute())
