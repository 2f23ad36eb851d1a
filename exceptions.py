# exceptions.py
from typing import List, Optional


class AppError(Exception):
    """Base error mapped to a JSON error response by the handlers in main.py."""

    status_code = 500
    default_errors: List[str] = []

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors if errors is not None else list(self.default_errors)


class ValidationError(AppError):
    status_code = 400
    default_errors = ["Invalid input"]


class AuthenticationError(AppError):
    status_code = 401
    default_errors = ["Not authenticated"]


class AuthorizationError(AppError):
    status_code = 403
    default_errors = ["Unauthorized"]


class NotFoundError(AppError):
    status_code = 404
    default_errors = ["Not found"]


class ConflictError(AppError):
    # duplicates are reported as 400, not 409
    status_code = 400
    default_errors = ["Duplicate"]
