"""Error Hierarchy — typed, categorized exceptions for all family-service failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Four kinds: validation, business rule (domain), not found, database
    - Domain errors carry a stable machine-readable code per violated rule
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with FamilyServiceError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: the service annotates the failing use case without
      changing the exception type, so isinstance checks keep working
    - is_*_error helpers walk __cause__: callers inspect kinds even through `raise ... from`
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    family_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class FamilyServiceError(Exception):
    """Base exception for all family-service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "family_id": self.context.family_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class ValidationError(FamilyServiceError):
    """Input or structural invariant violated before a mutation is attempted.

    `violations` holds every failure of an aggregated validation pass
    (RuleViolation instances from core/validation_pipeline.py).
    """
    def __init__(
        self,
        message: str,
        field: str | None = None,
        violations: tuple = (),
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field
        self.violations = tuple(violations)

    def to_response(self) -> dict:
        response = super().to_response()
        if self.field:
            response["error"]["field"] = self.field
        if self.violations:
            response["error"]["details"] = [v.to_dict() for v in self.violations]
        return response


# ─── Domain Errors (400) ────────────────────────────────────────

class DomainError(FamilyServiceError):
    """Business-rule violation raised by aggregate mutation logic."""
    def __init__(self, code: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class FamilyTooManyParentsError(DomainError):
    """Family already has the maximum of two parents."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_TOO_MANY_PARENTS",
            "family cannot have more than two parents", context,
        )


class ParentExistsError(DomainError):
    """Parent with the same id already belongs to the family."""
    def __init__(self, parent_id: str, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_PARENT_EXISTS",
            f"parent '{parent_id}' already exists in family", context,
        )
        self.parent_id = parent_id


class ParentDuplicateError(DomainError):
    """Parent with the same name and birth date already belongs to the family."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_PARENT_DUPLICATE",
            "parent with same name and birthdate already exists in family", context,
        )


class ChildExistsError(DomainError):
    """Child with the same id already belongs to the family."""
    def __init__(self, child_id: str, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_CHILD_EXISTS",
            f"child '{child_id}' already exists in family", context,
        )
        self.child_id = child_id


class FamilyNotMarriedError(DomainError):
    """Divorce attempted on a family that is not married."""
    def __init__(self, status: str, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_NOT_MARRIED",
            f"only married families can divorce (status is {status})", context,
        )


class DivorceRequiresTwoParentsError(DomainError):
    """Divorce attempted on a family without exactly two parents."""
    def __init__(self, count: int, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_DIVORCE_REQUIRES_TWO_PARENTS",
            f"divorce requires exactly two parents, family has {count}", context,
        )


class AbandonedFamilyRequiresChildError(DomainError):
    """Removal would leave an abandoned family without children."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "FAMILY_ABANDONED_REQUIRES_CHILD",
            "cannot remove the last child of an abandoned family", context,
        )


class FamilyStatusUpdateFailedError(DomainError):
    """Status transition would leave the family inconsistent."""
    def __init__(self, message: str, violations: tuple = (), context: ErrorContext | None = None):
        super().__init__("FAMILY_STATUS_UPDATE_FAILED", message, context)
        self.violations = tuple(violations)


class ParentAlreadyDeceasedError(DomainError):
    """Parent is already marked as deceased."""
    def __init__(self, parent_id: str, context: ErrorContext | None = None):
        super().__init__(
            "PARENT_ALREADY_DECEASED",
            f"parent '{parent_id}' is already marked as deceased", context,
        )
        self.parent_id = parent_id


# ─── Lookup Errors (404) ────────────────────────────────────────

class ResourceNotFoundError(FamilyServiceError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(FamilyServiceError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Inspection ─────────────────────────────────────────────────

def _find(err: BaseException | None, kind: type) -> FamilyServiceError | None:
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, kind):
            return err
        seen.add(id(err))
        err = err.__cause__
    return None


def is_validation_error(err: BaseException | None) -> bool:
    return _find(err, ValidationError) is not None


def is_domain_error(err: BaseException | None) -> bool:
    return _find(err, DomainError) is not None


def is_not_found_error(err: BaseException | None) -> bool:
    return _find(err, ResourceNotFoundError) is not None


def is_database_error(err: BaseException | None) -> bool:
    return _find(err, DatabaseError) is not None


def get_error_code(err: BaseException | None) -> str | None:
    """Code of the first FamilyServiceError in the cause chain, if any."""
    found = _find(err, FamilyServiceError)
    return found.code if found else None
