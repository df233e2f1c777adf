"""Eager Loading: resolves a composite relation for a batch of parents in one query.

Invariants:
    - Exactly one related query per relation name, regardless of parent count
    - Every parent ends with the relation set: matched value, None, or []
    - An empty parent list issues no query at all

Design Decisions:
    - The relation is built from the first parent with constraints disabled, then
      constrained for the whole batch (mirrors per-parent lazy loading semantics)
"""

import logging
from typing import Sequence

from composite_relations.core.boundary_protocols import RelationHost
from composite_relations.relations.base import no_constraints
from composite_relations.relations.model import resolve_relation

logger = logging.getLogger(__name__)


def eager_load_relation(parents: list[RelationHost], name: str) -> list[RelationHost]:
    """Load relation `name` for every parent with a single related query."""
    if not parents:
        return parents
    with no_constraints():
        relation = resolve_relation(parents[0], name)
    relation.add_eager_constraints(parents)
    relation.init_relation(parents, name)
    results = relation.get_eager()
    logger.info(
        f"Eager loaded '{name}': {len(results)} row(s) for {len(parents)} parent(s)",
        extra={
            "relation": name, "table": relation.related_table,
            "parents": len(parents), "results": len(results),
        },
    )
    return list(relation.match(parents, results, name))


def eager_load(parents: Sequence[RelationHost], *names: str) -> list[RelationHost]:
    """Eager load each relation in `names` onto `parents`."""
    loaded = list(parents)
    for name in names:
        loaded = eager_load_relation(loaded, name)
    return loaded
