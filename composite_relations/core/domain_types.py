"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - ColumnName may be plain ("unit") or table-qualified ("readings.unit")
    - KeyToken is only ever produced by KeyEncoder
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ColumnName = NewType("ColumnName", str)
KeyToken = NewType("KeyToken", str)


# ─── Constants ───────────────────────────────────────────────────

KEY_DELIMITER = "+"
EMPTY_KEY_SENTINEL = 0
COUNT_ALL = "count(*)"


# ─── Enums ───────────────────────────────────────────────────────

class Cardinality(str, Enum):
    """Relationship shapes supported over composite keys."""
    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"
    HAS_MANY = "has_many"


class RelationPhase(str, Enum):
    """Relation lifecycle: constraints are applied exactly once."""
    UNCONSTRAINED = "unconstrained"
    CONSTRAINED = "constrained"
