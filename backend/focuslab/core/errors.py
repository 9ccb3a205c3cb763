"""Error Hierarchy — typed, categorized exceptions for all FocusLab failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope used by every error handler
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with FocusLabError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Lives in core/: the state machine raises these without importing the shell
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
    AUTHENTICATION = "authentication"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    owner_id: str | None = None
    operation: str | None = None
    status: str | None = None
    debug_info: dict[str, Any] | None = None


class FocusLabError(Exception):
    """Base exception for all FocusLab errors."""

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
                    "session_id": self.context.session_id,
                    "operation": self.context.operation,
                    "status": self.context.status,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidTransitionError(FocusLabError):
    """Attempted operation is not legal from the session's current status."""
    def __init__(
        self, operation: str, status: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.operation = operation
        ctx.status = status
        super().__init__(
            _transition_message(operation, status),
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.operation = operation
        self.status = status


class SessionValidationError(FocusLabError):
    """New-session input failed validation. Carries every field error."""
    def __init__(self, errors: list, context: ErrorContext | None = None):
        fields = ", ".join(e.field for e in errors)
        super().__init__(
            f"Invalid timer session data: {fields}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.errors = errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [
            {"field": e.field, "message": e.message, "type": e.code}
            for e in self.errors
        ]
        return response


class MissingOwnerError(FocusLabError):
    """Request carried no owner identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Missing X-User-Id header",
            "MISSING_OWNER", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ResourceNotFoundError(FocusLabError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class ActiveSessionExistsError(FocusLabError):
    """Owner already has a running or paused session."""
    def __init__(self, owner_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.owner_id = owner_id
        super().__init__(
            "You already have an active timer. Complete or cancel it first.",
            "ACTIVE_SESSION_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ConcurrencyError(FocusLabError):
    """Concurrent modification detected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(FocusLabError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


def _transition_message(operation: str, status: str) -> str:
    if status in ("completed", "cancelled", "expired"):
        return f"Cannot {operation} timer: already finished ({status})"
    return f"Cannot {operation} timer while it is {status}"
