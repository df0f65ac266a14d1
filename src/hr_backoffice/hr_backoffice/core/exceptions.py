from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations.

    `code` is a stable identifier callers can branch on; the message is for humans.
    """

    code = "ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""

    code = "INVALID_PARAMETERS"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "UNAUTHORIZED"


class AuthenticationError(DomainError):
    """Raised when the current user cannot be resolved."""

    code = "UNAUTHENTICATED"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class BusinessRuleError(DomainError):
    """Raised when a request conflicts with a business rule (blackout, status, ...)."""


class ConflictError(DomainError):
    """Raised when a row changed between read and write."""

    code = "CONFLICT"


class StoreError(DomainError):
    """Raised when the backing store cannot be reached."""

    code = "NETWORK_ERROR"


class StoreTimeoutError(StoreError):
    code = "TIMEOUT"
