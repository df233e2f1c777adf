"""BelongsToComposite: inverse relation: the parent stores the composite foreign key.

Invariants:
    - foreign_key columns live on the parent; other_key columns on the related table
    - associate/dissociate only mutate the parent in memory; persistence is the caller's job
    - update() requires an associated record and raises RelatedRecordNotFoundError otherwise
    - Eager matching keeps the first related row per key
"""

import logging
from typing import Any, Sequence

from composite_relations.core.boundary_protocols import Query, Record
from composite_relations.core.composite_key import CompositeKey
from composite_relations.core.constraints import ConstraintBuilder
from composite_relations.core.domain_types import Cardinality
from composite_relations.core.errors import RelatedRecordNotFoundError
from composite_relations.core.matching import RelationMatcher
from composite_relations.relations.base import CompositeRelation

logger = logging.getLogger(__name__)


class BelongsToComposite(CompositeRelation):
    """Many-to-one relation matched on the related record's own key columns."""

    cardinality = Cardinality.BELONGS_TO

    def __init__(
        self,
        query: Query,
        parent: Record,
        related: Any,
        foreign_key: "CompositeKey | Sequence[str]",
        other_key: "CompositeKey | Sequence[str]",
        relation: str,
        builder: ConstraintBuilder | None = None,
        matcher: RelationMatcher | None = None,
    ):
        super().__init__(
            query, parent, related, foreign_key, other_key,
            relation_name=relation, builder=builder, matcher=matcher,
        )

    @property
    def foreign_key(self) -> CompositeKey:
        return self.parent_key

    @property
    def other_key(self) -> CompositeKey:
        return self.related_key

    @property
    def relation(self) -> str:
        return self.relation_name

    def get_results(self) -> Record | None:
        self._require_constrained()
        return self._query.execute_first()

    def associate(self, related: Record) -> Record:
        """Point the parent's foreign key at `related` and cache it on the parent."""
        for foreign, other in zip(self.foreign_key, self.other_key):
            self.parent.set_attribute(foreign, related.get_attribute(other))
        self.parent.set_relation(self.relation, related)
        logger.debug(
            f"Associated '{self.relation}' ({self.matcher.encoder.name_of(self.foreign_key)})",
            extra={"relation": self.relation, "table": self.related_table},
        )
        return self.parent

    def dissociate(self) -> Record:
        """Clear the parent's foreign key columns and its cached relation value."""
        for foreign in self.foreign_key:
            self.parent.set_attribute(foreign, None)
        self.parent.set_relation(self.relation, None)
        return self.parent

    def update(self, attributes: dict[str, Any]) -> bool:
        """Merge `attributes` into the associated record and persist it."""
        instance = self.get_results()
        if instance is None:
            raise RelatedRecordNotFoundError(
                self.relation, self.related_table, self._context(),
            )
        return instance.update(attributes)
