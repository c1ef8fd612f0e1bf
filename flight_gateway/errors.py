"""
Error taxonomy shared by the domain, the transport and both front ends.

Errors are classified by kind. Front ends turn any of them into an
ErrorResponse so callers never see a stack trace.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Error codes exposed to callers."""
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UPSTREAM = "UPSTREAM"
    TIMEOUT = "TIMEOUT"
    INTERNAL = "INTERNAL"


class GatewayError(Exception):
    """Base class for all errors raised by the gateway."""
    code = ErrorCode.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(GatewayError, ValueError):
    """Caller-supplied data violates a precondition."""
    code = ErrorCode.VALIDATION

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class NotFoundError(GatewayError):
    code = ErrorCode.NOT_FOUND


class ConflictError(GatewayError):
    code = ErrorCode.CONFLICT


class UpstreamCommunicationError(GatewayError):
    """The provider answered with a failure status or could not be reached."""
    code = ErrorCode.UPSTREAM

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UpstreamTimeoutError(GatewayError):
    """The provider did not answer in time."""
    code = ErrorCode.TIMEOUT


class InternalError(GatewayError):
    code = ErrorCode.INTERNAL


# Messages shown to callers; provider bodies are never echoed for these kinds.
_PUBLIC_MESSAGES = {
    ErrorCode.VALIDATION: "Invalid input parameters.",
    ErrorCode.NOT_FOUND: "Resource not found.",
    ErrorCode.CONFLICT: "Operation not allowed in the current state.",
    ErrorCode.UPSTREAM: "Error communicating with the flight provider.",
    ErrorCode.TIMEOUT: "The flight provider did not respond in time.",
    ErrorCode.INTERNAL: "An internal error occurred. Please try again later.",
}

_DETAIL_CODES = {ErrorCode.VALIDATION, ErrorCode.NOT_FOUND, ErrorCode.CONFLICT}


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error description returned by the front ends."""
    code: str
    message: str
    detail: Optional[str]
    correlation_id: Optional[str]
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def error_code_for(exc: BaseException) -> ErrorCode:
    """Classify an exception into an ErrorCode."""
    if isinstance(exc, GatewayError):
        return exc.code
    return ErrorCode.INTERNAL


def describe_error(exc: BaseException, correlation_id: Optional[str] = None) -> ErrorResponse:
    """
    Build the caller-facing description of an error and log it.

    Validation, not-found and conflict errors keep their own message as
    detail. Upstream, timeout and unexpected errors expose only a fixed
    message so provider or infrastructure details do not leak.
    """
    code = error_code_for(exc)
    detail = str(exc) if code in _DETAIL_CODES else None

    if code in _DETAIL_CODES:
        logger.warning(
            "Request failed [%s] %s: %s", correlation_id, type(exc).__name__, exc
        )
    else:
        logger.error(
            "Request failed [%s] %s: %s",
            correlation_id,
            type(exc).__name__,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )

    return ErrorResponse(
        code=code.value,
        message=_PUBLIC_MESSAGES[code],
        detail=detail,
        correlation_id=correlation_id,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
