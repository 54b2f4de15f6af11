"""Custom exceptions for the Kount adapter."""

from typing import Any


class KountError(Exception):
    """Base exception for Kount adapter errors."""

    # Status the web layer should answer with
    http_status: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class OrderValidationError(KountError):
    """Raised when the caller's order fails required-field or shape checks."""

    http_status = 400

    def __init__(self, message: str, field: str | None = None, errors: list[dict] | None = None):
        super().__init__(message)
        self.field = field
        self.errors = errors or []


class AuthenticationError(KountError):
    """Raised when the OAuth token exchange fails or is rejected."""

    http_status = 401

    def __init__(self, message: str, json_response: Any = None):
        super().__init__(message)
        self.json_response = json_response


class APIError(KountError):
    """Raised when the order submission fails, or on any unexpected failure."""

    http_status = 422

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
