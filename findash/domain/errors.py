from typing import Any, List, Optional


class FinDashError(Exception):
    """Base error rendered into the response envelope with ``status_code``."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(FinDashError, ValueError):
    status_code = 400
    default_message = "Validation failed"


class ConflictError(FinDashError):
    status_code = 400
    default_message = "Resource already exists"


class AuthError(FinDashError):
    status_code = 401
    default_message = "Access token required"


class InvalidCredentials(AuthError):
    status_code = 401
    default_message = "Invalid email or password"


class InvalidToken(AuthError):
    status_code = 403
    default_message = "Invalid or expired token"


class NotFoundError(FinDashError):
    status_code = 404
    default_message = "Resource not found"


class InternalError(FinDashError):
    status_code = 500
