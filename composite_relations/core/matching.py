"""Relation Matcher: dictionary hash-join of fetched related records onto parents.

Invariants:
    - build_dictionary keeps fetch order inside every bucket
    - match_one attaches the FIRST record of a bucket; the rest are discarded silently
    - match_many attaches the whole bucket as a new list
    - A parent without a bucket gets the empty marker (None / []); absence never raises
    - Dictionaries are local to one call chain and never stored on the matcher

Design Decisions:
    - O(P + R): one pass over related records, one pass over parents
    - Parents are mutated in place via set_relation and also returned, so callers
      can chain
"""

import logging
from typing import Any, Iterable, Sequence

from composite_relations.core.boundary_protocols import Record
from composite_relations.core.composite_key import CompositeKey, KeyEncoder
from composite_relations.core.domain_types import KeyToken

logger = logging.getLogger(__name__)


class RelationMatcher:
    """Builds matching dictionaries and attaches their buckets to parents."""

    def __init__(self, encoder: KeyEncoder | None = None):
        self.encoder = encoder or KeyEncoder()

    def build_dictionary(
        self,
        related: Iterable[Record],
        grouping_cols: "CompositeKey | Sequence[str]",
    ) -> dict[KeyToken, list[Record]]:
        """Group related records by the token of their grouping columns."""
        key = CompositeKey.of(grouping_cols).plain()
        dictionary: dict[KeyToken, list[Record]] = {}
        for record in related:
            dictionary.setdefault(self.encoder.token_for(record, key), []).append(record)
        logger.debug(
            f"Built matching dictionary with {len(dictionary)} bucket(s)",
            extra={"buckets": len(dictionary)},
        )
        return dictionary

    def init_relation(
        self, parents: Sequence[Record], relation_name: str, default: Any = None,
    ) -> Sequence[Record]:
        """Seed every parent with the empty marker for `relation_name`."""
        for parent in parents:
            parent.set_relation(
                relation_name, list(default) if isinstance(default, list) else default,
            )
        return parents

    def match_one(
        self,
        parents: Sequence[Record],
        dictionary: dict[KeyToken, list[Record]],
        match_cols: "CompositeKey | Sequence[str]",
        relation_name: str,
    ) -> Sequence[Record]:
        """Attach the first matched record (or None) to each parent."""
        return self._match(parents, dictionary, match_cols, relation_name, many=False)

    def match_many(
        self,
        parents: Sequence[Record],
        dictionary: dict[KeyToken, list[Record]],
        match_cols: "CompositeKey | Sequence[str]",
        relation_name: str,
    ) -> Sequence[Record]:
        """Attach the full bucket (possibly []) to each parent."""
        return self._match(parents, dictionary, match_cols, relation_name, many=True)

    def _match(
        self,
        parents: Sequence[Record],
        dictionary: dict[KeyToken, list[Record]],
        match_cols: "CompositeKey | Sequence[str]",
        relation_name: str,
        many: bool,
    ) -> Sequence[Record]:
        key = CompositeKey.of(match_cols).plain()
        matched = 0
        for parent in parents:
            bucket = dictionary.get(self.encoder.token_for(parent, key))
            if bucket:
                matched += 1
            if many:
                parent.set_relation(relation_name, list(bucket or []))
            else:
                parent.set_relation(relation_name, bucket[0] if bucket else None)
        logger.debug(
            f"Matched {matched}/{len(parents)} parent(s) on '{relation_name}'",
            extra={"relation": relation_name, "parents": len(parents)},
        )
        return parents
