"""Error Hierarchy: typed, categorized exceptions for composite relation failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Configuration errors are programmer errors: raised before any query runs, never retried
    - A missing match is NOT an error; matching code never raises RelatedRecordNotFoundError
    - to_dict() produces the envelope used for structured logging

Design Decisions:
    - Single hierarchy with CompositeRelationError base: callers catch one type
    - RelationNotImplementedError also subclasses NotImplementedError so generic
      handlers for unsupported operations still see it
    - ErrorContext as dataclass: relation/table/columns travel with the error
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories."""
    CONFIGURATION = "configuration"
    NOT_IMPLEMENTED = "not_implemented"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"


@dataclass
class ErrorContext:
    """Where the error happened: which relation, table and key columns."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    relation: str | None = None
    table: str | None = None
    columns: list[str] | None = None


class CompositeRelationError(Exception):
    """Base exception for all composite relation errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a structured error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "relation": self.context.relation,
                    "table": self.context.table,
                    "columns": self.context.columns,
                },
            }
        }


# ─── Programmer Errors ──────────────────────────────────────────

class ConfigurationError(CompositeRelationError):
    """Relation is misconfigured (asymmetrical keys, repeated constraints, ...)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context,
        )


class AsymmetricalKeyError(ConfigurationError):
    """Local and foreign key descriptors have different lengths."""
    def __init__(
        self, local: list[str], foreign: list[str], context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Asymmetrical foreign key and local key: "
            f"{len(local)} local column(s) {local} vs "
            f"{len(foreign)} foreign column(s) {foreign}",
            context,
        )
        self.code = "ASYMMETRICAL_KEY"
        self.local = local
        self.foreign = foreign


class RelationNotImplementedError(CompositeRelationError, NotImplementedError):
    """Write attempted through a read-only (has-one / has-many) relation."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"{operation}() is not implemented for composite has-one/has-many relations",
            "NOT_IMPLEMENTED", ErrorCategory.NOT_IMPLEMENTED,
            ErrorSeverity.ERROR, context,
        )
        self.operation = operation


class RelatedRecordNotFoundError(CompositeRelationError):
    """Operation requires an associated record but none exists."""
    def __init__(self, relation: str, table: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.relation = ctx.relation or relation
        ctx.table = ctx.table or table
        super().__init__(
            f"No '{table}' record is associated through relation '{relation}'",
            "RELATED_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class DatabaseError(CompositeRelationError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
