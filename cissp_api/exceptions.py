"""Exception hierarchy and the error-to-status mapping used by every endpoint."""

from typing import Any, Optional

import pydantic
from sqlalchemy.exc import IntegrityError, SQLAlchemyError


class CisspError(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        self.extra: dict[str, Any] = {}
        super().__init__(self.message)


class NotFoundError(CisspError):
    """Resource not found error."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404, code="NOT_FOUND")


class ValidationError(CisspError):
    """Request payload failed a business rule."""

    def __init__(self, message: str, details: Any = None, **extra: Any) -> None:
        super().__init__(message, status_code=400, code="VALIDATION_ERROR", details=details)
        self.extra.update(extra)


class AuthenticationError(CisspError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, status_code=401, code="UNAUTHENTICATED")


class PermissionDeniedError(CisspError):
    def __init__(self, message: str = "Admin access required") -> None:
        super().__init__(message, status_code=403, code="FORBIDDEN")


class PaymentRequiredError(CisspError):
    """Premium content requested without paid access."""

    def __init__(self, message: str = "Paid access required") -> None:
        super().__init__(message, status_code=403, code="PAID_ACCESS_REQUIRED")


class ConflictError(CisspError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=409, code="CONFLICT")


class QuotaExceededError(CisspError):
    """Daily AI generation quota is used up or disabled."""

    def __init__(self, message: str, remaining_quota: int = 0) -> None:
        super().__init__(message, status_code=403, code="QUOTA_EXCEEDED")
        self.extra["remainingQuota"] = remaining_quota


class RateLimitError(CisspError):
    def __init__(self, message: str = "Too many requests. Please try again later.") -> None:
        super().__init__(message, status_code=429, code="RATE_LIMITED")


class ServiceError(CisspError):
    """Service layer error."""


class QuizGenerationError(CisspError):
    """AI generation failed.

    ``error_code`` is one of ``TIMEOUT``, ``API_ERROR``, ``PARSE_ERROR``,
    ``VALIDATION_ERROR``, ``INVALID_RESPONSE`` or ``NO_MODELS``. Parse and
    validation failures are never retried.
    """

    NON_RETRYABLE = ("PARSE_ERROR", "VALIDATION_ERROR")

    def __init__(self, message: str, error_code: str, model_id: Optional[str] = None) -> None:
        super().__init__(message, status_code=500, code=error_code)
        self.error_code = error_code
        self.model_id = model_id

    @property
    def retryable(self) -> bool:
        return self.error_code not in self.NON_RETRYABLE


# Ordered; the first matching fragment decides the status.
_MESSAGE_STATUS_RULES: list[tuple[tuple[str, ...], int]] = [
    (("admin", "unauthorized"), 403),
    (("unauthenticated", "not authenticated"), 401),
    (("not found",), 404),
    (("invalid", "required"), 400),
    (("rate limit", "too many"), 429),
]


def status_code_for(error: BaseException) -> int:
    """Map any exception to an HTTP status code."""
    if isinstance(error, CisspError):
        return error.status_code
    if isinstance(error, pydantic.ValidationError):
        return 400
    # Database errors carry table names, which must not hit the message rules
    if isinstance(error, IntegrityError):
        return 400
    if isinstance(error, SQLAlchemyError):
        return 500

    message = str(error).lower()
    for fragments, status_code in _MESSAGE_STATUS_RULES:
        if any(fragment in message for fragment in fragments):
            return status_code
    return 500


def error_body(
    message: str,
    status_code: int,
    code: Optional[str] = None,
    details: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message, "statusCode": status_code}
    if code:
        body["code"] = code
    if details is not None:
        body["details"] = details
    body.update(extra)
    return body


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{path, message}`` pairs."""
    formatted = []
    for err in errors:
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({"path": ".".join(location), "message": err.get("msg", "Invalid value")})
    return formatted
