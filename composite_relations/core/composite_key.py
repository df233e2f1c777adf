"""Composite Keys: column descriptors and the token encoding used for matching.

Invariants:
    - A CompositeKey has at least one column; column order is significant
    - Local and foreign descriptors of one relation have equal length (validate_symmetry)
    - encode() is pure: same ordered values -> same token; reordered values -> different token
    - Canonical forms: None -> "", True -> "1", False -> "", integral numbers -> integer text

Design Decisions:
    - Tokens are delimiter-joined strings, compatible with existing "a+b" composite
      attribute names. A value containing the delimiter can collide with another
      key; callers with such data configure a different delimiter
    - Integral floats/Decimals collapse to integer text so 1, 1.0 and Decimal("1")
      match across drivers that return different numeric types
"""

from dataclasses import dataclass
from decimal import Decimal
from numbers import Number
from typing import Any, Iterable, Sequence

from composite_relations.core.boundary_protocols import Record
from composite_relations.core.domain_types import KEY_DELIMITER, ColumnName, KeyToken
from composite_relations.core.errors import (
    AsymmetricalKeyError, ConfigurationError, ErrorContext,
)


def plain_column(name: str) -> ColumnName:
    """Strip a table qualifier: "readings.unit" -> "unit"."""
    return ColumnName(name.rsplit(".", 1)[-1])


@dataclass(frozen=True)
class CompositeKey:
    """Ordered column descriptor for one side of a composite join."""

    columns: tuple[ColumnName, ...]

    def __post_init__(self):
        if not self.columns:
            raise ConfigurationError("Composite key requires at least one column")

    @classmethod
    def of(cls, columns: "Iterable[str] | str | CompositeKey") -> "CompositeKey":
        if isinstance(columns, CompositeKey):
            return columns
        if isinstance(columns, str):
            columns = [columns]
        return cls(tuple(ColumnName(c) for c in columns))

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self):
        return iter(self.columns)

    def __getitem__(self, index: int) -> ColumnName:
        return self.columns[index]

    def joined(self, delimiter: str = KEY_DELIMITER) -> str:
        return delimiter.join(self.columns)

    @property
    def name(self) -> str:
        """Composite attribute name with the default delimiter, e.g. "region+unit"."""
        return self.joined()

    def plain(self) -> "CompositeKey":
        return CompositeKey(tuple(plain_column(c) for c in self.columns))

    def qualified(self, table: str) -> "CompositeKey":
        """Prefix every column with `table.`, replacing any existing qualifier."""
        return CompositeKey(
            tuple(ColumnName(f"{table}.{plain_column(c)}") for c in self.columns),
        )

    def values_of(self, record: Record) -> list[Any]:
        return [record.get_attribute(c) for c in self.plain().columns]


def validate_symmetry(
    local: "CompositeKey | Sequence[str]",
    foreign: "CompositeKey | Sequence[str]",
    context: ErrorContext | None = None,
) -> None:
    """Raise unless both descriptors are non-empty and equally long."""
    local_cols = list(local)
    foreign_cols = list(foreign)
    if not local_cols or not foreign_cols:
        raise ConfigurationError(
            "Composite relation key descriptors must not be empty", context,
        )
    if len(local_cols) != len(foreign_cols):
        raise AsymmetricalKeyError(local_cols, foreign_cols, context)


def canonical(value: Any) -> str:
    """Canonical string form of one key component."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, (Number, Decimal)):
        try:
            if value == int(value):
                return str(int(value))
        except (TypeError, ValueError, OverflowError):
            pass
    return str(value)


class KeyEncoder:
    """Turns composite key values into dictionary tokens."""

    def __init__(self, delimiter: str = KEY_DELIMITER):
        if not delimiter:
            raise ConfigurationError("Key delimiter must be a non-empty string")
        self.delimiter = delimiter

    def encode(self, values: Iterable[Any]) -> KeyToken:
        return KeyToken(self.delimiter.join(canonical(v) for v in values))

    def name_of(self, key: "CompositeKey | Sequence[str]") -> str:
        """Composite attribute name of `key` under this encoder's delimiter."""
        return CompositeKey.of(key).joined(self.delimiter)

    def token_for(self, record: Record, key: "CompositeKey | Sequence[str]") -> KeyToken:
        """Encode the record's values at the (plain) key columns."""
        return self.encode(CompositeKey.of(key).values_of(record))
