"""Error Hierarchy — typed, categorized exceptions for every Dynamic API failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Registration errors are fatal: they escape create_app() and the process never serves
    - Per-request errors (400/413) abort only the request that raised them
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with DynamicApiError base: one FastAPI handler catches all
      (ADR: uniform error shape)
    - UnsupportedParameterTypeError extends ParameterConversionError: the binder
      is all-or-nothing and callers can catch both with one clause
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
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    PAYLOAD = "payload"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    parameter: str | None = None
    path: str | None = None
    debug_info: dict[str, Any] | None = None


class DynamicApiError(Exception):
    """Base exception for all Dynamic API errors."""

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
                    "operation": self.context.operation,
                    "parameter": self.context.parameter,
                    "path": self.context.path,
                },
            }
        }


# ─── Registration Errors (fatal) ────────────────────────────────

class InvalidCapabilityTypeError(DynamicApiError):
    """Type passed to the scanner is not a RemoteClient capability interface."""
    def __init__(self, type_name: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"'{type_name}' is not a valid capability interface: {reason}",
            "INVALID_CAPABILITY_TYPE", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.type_name = type_name


class NoCapabilityInterfacesError(DynamicApiError):
    """Discovery found no RemoteClient subclasses in the scanned modules."""
    def __init__(self, modules: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"No capability interfaces found in {', '.join(modules) or '<none>'}. "
            f"Make sure your interfaces derive from RemoteClient.",
            "NO_CAPABILITY_INTERFACES", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.modules = modules


class DuplicateRouteError(DynamicApiError):
    """A (verb, path) pair was registered twice."""
    def __init__(self, verb: str, path: str, context: ErrorContext | None = None):
        super().__init__(
            f"Route {verb} {path} is already registered",
            "DUPLICATE_ROUTE", ErrorCategory.CONFLICT,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.verb = verb
        self.path = path


class ClientNotRegisteredError(DynamicApiError):
    """No implementation registered for a mapped capability interface."""
    def __init__(self, interface_name: str, context: ErrorContext | None = None):
        super().__init__(
            f"No implementation registered for '{interface_name}'",
            "CLIENT_NOT_REGISTERED", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.interface_name = interface_name


# ─── Request Errors (400-level) ─────────────────────────────────

class PayloadTooLargeError(DynamicApiError):
    """JSON body exceeds the configured size limit."""
    def __init__(self, limit_bytes: int, context: ErrorContext | None = None):
        super().__init__(
            f"JSON body too large (max {limit_bytes} bytes).",
            "PAYLOAD_TOO_LARGE", ErrorCategory.PAYLOAD,
            ErrorSeverity.ERROR, context, 413,
        )
        self.limit_bytes = limit_bytes


class InvalidBodyError(DynamicApiError):
    """JSON body is malformed, too deeply nested, or fails validation."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid JSON payload: {reason}",
            "INVALID_BODY", ErrorCategory.PAYLOAD,
            ErrorSeverity.ERROR, context, 400,
        )
        self.reason = reason


class ParameterConversionError(DynamicApiError):
    """Query/route value could not be converted to the parameter's type."""
    def __init__(
        self,
        parameter: str,
        target_type: str,
        raw_value: Any,
        context: ErrorContext | None = None,
        *,
        message: str | None = None,
        code: str = "PARAMETER_CONVERSION_ERROR",
    ):
        ctx = context or ErrorContext()
        ctx.parameter = parameter
        super().__init__(
            message or (
                f"Cannot convert value '{raw_value}' of parameter "
                f"'{parameter}' to type '{target_type}'"
            ),
            code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.parameter = parameter
        self.target_type = target_type
        self.raw_value = raw_value


class UnsupportedParameterTypeError(ParameterConversionError):
    """Target type is outside the query/route conversion whitelist."""
    def __init__(
        self,
        parameter: str,
        target_type: str,
        raw_value: Any,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            parameter, target_type, raw_value, context,
            message=(
                f"Type '{target_type}' of parameter '{parameter}' is not "
                f"allowed for simple conversion"
            ),
            code="UNSUPPORTED_PARAMETER_TYPE",
        )
