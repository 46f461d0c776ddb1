"""Error Hierarchy — typed, classified exceptions for every gateway failure mode.

Invariants:
    - Every error carries a numeric ErrorCode, an ErrorCategory and an ErrorSeverity
    - http_status is derived from the code range only:
      400-499 → 400, 500-599 → 502, anything else → 500
    - to_response() produces the REST envelope {status, code, message, requestId}
    - Handler failures crossing the dispatch bus are ContoError instances

Design Decisions:
    - Numeric codes over string codes: the HTTP layer maps ranges, not names
      (ADR: one table drives status mapping for workers and routes alike)
    - ErrorContext as dataclass: correlation id and topic travel with the error
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from datetime import datetime, timezone


class ErrorCode(IntEnum):
    """Stable numeric classification for every failure reply."""
    # Client validation (→ 400)
    VALIDATION_INVALID_REQUEST = 400
    VALIDATION_MISSING_PARAMETER = 401
    VALIDATION_INVALID_VALUE = 402

    # Bank API (→ 502)
    API_ERROR = 500
    API_CONNECTION_FAILED = 501
    API_PARSE_ERROR = 502

    # Internal (→ 500)
    INTERNAL_SERIALIZATION_ERROR = 600
    INTERNAL_ERROR = 601
    DISPATCH_TIMEOUT = 602
    DISPATCH_NO_HANDLER = 603


def http_status_for(code: int) -> int:
    """Map a classification code to the transport status the REST layer returns."""
    if 400 <= code < 500:
        return 400
    if 500 <= code < 600:
        return 502
    return 500


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories, one per taxonomy entry."""
    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROVIDER = "provider"
    PARSE = "parse"
    SERIALIZATION = "serialization"
    DISPATCH = "dispatch"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logging and the error reply."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    correlation_id: str | None = None
    topic: str | None = None
    status_code: int | None = None


class ContoError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
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

    @property
    def http_status(self) -> int:
        return http_status_for(self.code)

    def to_response(self) -> dict:
        """Convert to the standardized REST error reply."""
        return {
            "status": "ERROR",
            "code": int(self.code),
            "category": self.category.value,
            "message": self.message,
            "requestId": self.context.correlation_id,
        }


# ─── Validation (400-level) ─────────────────────────────────────

class InvalidRequestError(ContoError):
    """Inbound payload could not be parsed or violated a constraint."""
    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_INVALID_REQUEST,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"ErrorCode {int(code)} - {message}", code,
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context,
        )


# ─── Bank API (500-level) ───────────────────────────────────────

class ProviderAPIError(ContoError):
    """Bank API was reached and answered with a non-success status."""
    def __init__(
        self, message: str, status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.status_code = status_code
        super().__init__(
            message, ErrorCode.API_ERROR, ErrorCategory.PROVIDER,
            ErrorSeverity.ERROR, ctx,
        )


class ProviderConnectionError(ContoError):
    """Bank API call never reached the provider or never returned."""
    def __init__(self, cause: str, context: ErrorContext | None = None):
        super().__init__(
            f"ErrorCode {int(ErrorCode.API_CONNECTION_FAILED)} - "
            f"Unable to call bank API, service may be down: {cause}",
            ErrorCode.API_CONNECTION_FAILED, ErrorCategory.TRANSPORT,
            ErrorSeverity.CRITICAL, context,
        )


class ProviderParseError(ContoError):
    """Bank API body (success or error envelope) could not be decoded."""
    def __init__(self, what: str, context: ErrorContext | None = None):
        super().__init__(
            f"ErrorCode {int(ErrorCode.API_PARSE_ERROR)} - {what}",
            ErrorCode.API_PARSE_ERROR, ErrorCategory.PARSE,
            ErrorSeverity.ERROR, context,
        )


# ─── Internal (600-level) ───────────────────────────────────────

class SerializationError(ContoError):
    """Outbound reply could not be encoded."""
    def __init__(self, what: str, context: ErrorContext | None = None):
        super().__init__(
            f"ErrorCode {int(ErrorCode.INTERNAL_SERIALIZATION_ERROR)} - {what}",
            ErrorCode.INTERNAL_SERIALIZATION_ERROR, ErrorCategory.SERIALIZATION,
            ErrorSeverity.CRITICAL, context,
        )


class InternalProcessingError(ContoError):
    """Unexpected failure inside a worker."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"ErrorCode {int(ErrorCode.INTERNAL_ERROR)} - {message}",
            ErrorCode.INTERNAL_ERROR, ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context,
        )


class DispatchError(ContoError):
    """Dispatch bus could not deliver a request or collect its reply."""
    def __init__(
        self, message: str, code: ErrorCode, topic: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.topic = topic
        super().__init__(
            message, code, ErrorCategory.DISPATCH, ErrorSeverity.CRITICAL, ctx,
        )
        self.topic = topic


class NoSubscriberError(DispatchError):
    """Request published to a topic nobody subscribed to."""
    def __init__(self, topic: str, context: ErrorContext | None = None):
        super().__init__(
            f"ErrorCode {int(ErrorCode.DISPATCH_NO_HANDLER)} - "
            f"No handler registered for topic '{topic}'",
            ErrorCode.DISPATCH_NO_HANDLER, topic, context,
        )


class DispatchTimeoutError(DispatchError):
    """Handler did not reply before the request deadline."""
    def __init__(
        self, topic: str, timeout: float, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"ErrorCode {int(ErrorCode.DISPATCH_TIMEOUT)} - "
            f"Timed out after {timeout:g}s waiting for reply on '{topic}'",
            ErrorCode.DISPATCH_TIMEOUT, topic, context,
        )
        self.timeout = timeout


class DatabaseError(ContoError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            ErrorCode.INTERNAL_ERROR, ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
