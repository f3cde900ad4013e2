"""
Error taxonomy for reservation and inventory operations.

Every error is raised synchronously by the operation that detects it and is
never retried. Each carries the HTTP status the API layer answers with.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for all domain errors surfaced to callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """Missing or malformed input, date-range violations, over-capacity."""

    status_code = 422

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]

    @classmethod
    def from_failures(cls, failures: list[str]) -> "ValidationError":
        return cls("; ".join(failures), errors=failures)


class ConflictError(BookingError):
    """No inventory, wrong reservation state, policy window, suspended property."""

    status_code = 409


class NotFoundError(BookingError):
    """Unknown reservation, property or coupon (or one the caller cannot see)."""

    status_code = 404


class AuthorizationError(BookingError):
    """The acting owner does not control the target property."""

    status_code = 403
