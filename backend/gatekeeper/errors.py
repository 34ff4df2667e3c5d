"""Error types raised by the gate and the JSON envelope every handler returns."""
from collections.abc import Iterable
from typing import Any

from fastapi import status

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"


class AppError(Exception):
    code: str = "APP_ERROR"
    message: str = "Application error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    details: Any | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
    ):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if details is not None:
            self.details = details

        super().__init__(self.message)


class InvalidArgumentError(AppError, TypeError):
    """Raised when a caller breaks the argument contract of a decision function.

    This is a programming error (a bare string passed where a permission list is
    expected, a non-string pathname), not a runtime condition to recover from.
    """

    code = "INVALID_ARGUMENT"
    message = "Invalid argument"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    code = "AUTH_ERROR"
    message = "Authentication required"
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionError(AppError):  # type: ignore[override]
    code = "PERMISSION_DENIED"
    message = "Insufficient permissions"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str | None = None,
        *,
        required_permissions: Iterable[str] = (),
        details: Any | None = None,
    ):
        self.required_permissions = tuple(required_permissions)
        if details is None and self.required_permissions:
            details = {"required_permissions": list(self.required_permissions)}
        super().__init__(message, details=details)


class InternalError(AppError):
    code = "INTERNAL_ERROR"
    message = "Internal server error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Status -> (code, client-safe message) for errors raised outside AppError
HTTP_ERRORS: dict[int, tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: (VALIDATION_ERROR, "Validation error"),
    status.HTTP_401_UNAUTHORIZED: (AuthError.code, AuthError.message),
    status.HTTP_403_FORBIDDEN: (PermissionError.code, PermissionError.message),
    status.HTTP_404_NOT_FOUND: (NOT_FOUND, "Resource not found"),
    status.HTTP_422_UNPROCESSABLE_ENTITY: (VALIDATION_ERROR, "Request validation failed"),
}


def error_payload(
    code: str,
    message: str,
    details: Any | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message, "details": details}
    if request_id:
        error["request_id"] = request_id
    return {"error": error}


def resolve_error_code(status_code: int) -> str:
    if status_code in HTTP_ERRORS:
        return HTTP_ERRORS[status_code][0]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InternalError.code
    return "UNKNOWN_ERROR"


def safe_message(status_code: int) -> str:
    if status_code in HTTP_ERRORS:
        return HTTP_ERRORS[status_code][1]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return InternalError.message
    return "Request failed"
