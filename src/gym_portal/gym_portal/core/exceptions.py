from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization_error"


class MalformedInput(DomainError):
    """Raised when a membership payload matches none of the known shapes.

    The normalizer recovers from it locally; callers never see it.
    """

    code = "malformed_input"


class InvalidTransition(DomainError):
    """Raised when check-out targets a missing or already closed record."""

    code = "invalid_transition"

    NOT_FOUND = "not_found"
    ALREADY_CHECKED_OUT = "already_checked_out"

    def __init__(self, message: str, *, attendance_id: int, reason: str):
        super().__init__(message)
        self.attendance_id = attendance_id
        self.reason = reason


class DuplicateOpenSession(DomainError):
    """Raised when a member checks in while an earlier check-in is still open."""

    code = "duplicate_open_session"

    def __init__(self, message: str, *, user_id: int, attendance_id: Optional[int] = None):
        super().__init__(message)
        self.user_id = user_id
        self.attendance_id = attendance_id


class PaymentDeclined(DomainError):
    """Raised when the payment gateway reports a failure."""

    code = "payment_declined"
