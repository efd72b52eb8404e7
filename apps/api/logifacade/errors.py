"""Application exception types."""

from typing import Any

from logifacade.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


class ValidationError(ApiError):
    """Missing or malformed input; ``fields`` maps field name to problem."""

    def __init__(self, message: str, fields: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=400,
            code="VALIDATION_ERROR",
            message=message,
            details={"fields": fields} if fields else None,
        )


class AuthenticationError(ApiError):
    def __init__(self, message: str = "Invalid or missing bearer token") -> None:
        super().__init__(status_code=401, code="UNAUTHORIZED", message=message)


class AuthorizationError(ApiError):
    def __init__(self, message: str = "Insufficient role for this operation", details: dict | None = None) -> None:
        super().__init__(status_code=403, code="FORBIDDEN", message=message, details=details)


class NotFoundError(ApiError):
    def __init__(self, message: str = "Resource not found", details: dict | None = None) -> None:
        super().__init__(status_code=404, code="RESOURCE_NOT_FOUND", message=message, details=details)


class BackendUnavailableError(ApiError):
    """A single backend system could not be reached or answered badly.

    Only surfaced when one backend is queried explicitly; fallback resolution
    absorbs it.
    """

    def __init__(self, system: str, reason: str, details: dict[str, Any] | None = None) -> None:
        self.system = system
        self.reason = reason
        super().__init__(
            status_code=503,
            code="BACKEND_UNAVAILABLE",
            message=f"Backend system {system} is unavailable",
            details={"system": system, "reason": reason, **(details or {})},
        )


class InternalError(ApiError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(status_code=500, code="INTERNAL_ERROR", message=message)


__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "BackendUnavailableError",
    "InternalError",
    "NotFoundError",
    "ValidationError",
]
