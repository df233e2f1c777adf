"""Relationship Surface: mixin that lets a record type declare composite relations.

Invariants:
    - Relations are created per access; the mixin caches results, never relation objects
    - Base constraints are applied at creation unless no_constraints() is active
    - belongs_to_composite takes the relation name explicitly (no call-stack inspection)
    - A relationship method must return a CompositeRelation or ConfigurationError is raised

Design Decisions:
    - Key encoder / constraint sentinel come from Settings, so every relation in a
      process encodes tokens the same way
    - Record Protocol methods implemented over getattr/setattr plus a per-instance
      relation cache, so any attribute-bearing class (ORM model or plain object) works
"""

from typing import Any, Sequence

from composite_relations.config import get_settings
from composite_relations.core.boundary_protocols import Query
from composite_relations.core.composite_key import KeyEncoder
from composite_relations.core.constraints import ConstraintBuilder
from composite_relations.core.errors import ConfigurationError, ErrorContext
from composite_relations.core.matching import RelationMatcher
from composite_relations.relations.base import CompositeRelation, constraints_enabled
from composite_relations.relations.belongs_to import BelongsToComposite
from composite_relations.relations.has_one_or_many import (
    HasManyComposite, HasOneComposite,
)

_RELATIONS_ATTR = "_composite_relations"


def relation_tooling() -> tuple[ConstraintBuilder, RelationMatcher]:
    """Builder and matcher configured from Settings."""
    settings = get_settings()
    return (
        ConstraintBuilder(settings.empty_key_sentinel),
        RelationMatcher(KeyEncoder(settings.key_delimiter)),
    )


def resolve_relation(record: Any, name: str) -> CompositeRelation:
    """Call the relationship method `name` on `record` and check what it returned."""
    method = getattr(record, name, None)
    if not callable(method):
        raise ConfigurationError(
            f"{type(record).__name__} has no relationship method '{name}'",
            ErrorContext(relation=name),
        )
    relation = method()
    if not isinstance(relation, CompositeRelation):
        raise ConfigurationError(
            f"Relationship method '{name}' must return a CompositeRelation, "
            f"got {type(relation).__name__}",
            ErrorContext(relation=name),
        )
    return relation


class CompositeRelationsMixin:
    """Record implementation plus the composite relationship factories."""

    # ─── Record Protocol ─────────────────────────────────────────

    @classmethod
    def get_table(cls) -> str:
        return cls.__tablename__

    def get_attribute(self, name: str) -> Any:
        return getattr(self, name, None)

    def set_attribute(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def _relation_cache(self) -> dict[str, Any]:
        return self.__dict__.setdefault(_RELATIONS_ATTR, {})

    def get_relation(self, name: str) -> Any:
        return self._relation_cache().get(name)

    def set_relation(self, name: str, value: Any) -> None:
        self._relation_cache()[name] = value

    def unset_relation(self, name: str) -> None:
        self._relation_cache().pop(name, None)

    def relation_loaded(self, name: str) -> bool:
        return name in self._relation_cache()

    def new_query_for(self, related: type) -> Query:
        raise NotImplementedError(
            f"{type(self).__name__} must implement new_query_for()",
        )

    def update(self, attributes: dict[str, Any]) -> bool:
        raise NotImplementedError(f"{type(self).__name__} must implement update()")

    # ─── Relationship factories ──────────────────────────────────

    def _constrain(self, relation: CompositeRelation) -> CompositeRelation:
        if constraints_enabled():
            relation.add_constraints()
        return relation

    def has_many_composite(
        self, related: type, foreign_key: Sequence[str], local_key: Sequence[str],
    ) -> HasManyComposite:
        """One-to-many: `foreign_key` columns on `related` point at our `local_key`."""
        builder, matcher = relation_tooling()
        return self._constrain(HasManyComposite(
            self.new_query_for(related), self, related, foreign_key, local_key,
            builder=builder, matcher=matcher,
        ))

    def has_one_composite(
        self, related: type, foreign_key: Sequence[str], local_key: Sequence[str],
    ) -> HasOneComposite:
        builder, matcher = relation_tooling()
        return self._constrain(HasOneComposite(
            self.new_query_for(related), self, related, foreign_key, local_key,
            builder=builder, matcher=matcher,
        ))

    def belongs_to_composite(
        self,
        related: type,
        foreign_key: Sequence[str],
        other_key: Sequence[str],
        relation: str,
    ) -> BelongsToComposite:
        """Inverse relation: our `foreign_key` columns hold `related`'s `other_key`."""
        if not relation:
            raise ConfigurationError(
                "belongs_to_composite requires an explicit relation name",
                ErrorContext(table=related.get_table()),
            )
        builder, matcher = relation_tooling()
        return self._constrain(BelongsToComposite(
            self.new_query_for(related), self, related, foreign_key, other_key,
            relation, builder=builder, matcher=matcher,
        ))

    # ─── Lazy loading ────────────────────────────────────────────

    def get_relation_value(self, name: str) -> Any:
        """Resolve relationship `name` once and cache its results on this record."""
        if self.relation_loaded(name):
            return self.get_relation(name)
        results = resolve_relation(self, name).get_results()
        self.set_relation(name, results)
        return results
