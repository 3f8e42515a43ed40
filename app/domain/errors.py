from __future__ import annotations

from app.domain.enums import PaymentStatus


class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidOrExpiredCode(DomainError):
    """
    A verification code was rejected.

    Deliberately carries no reason: wrong code, wrong purpose, expiry and
    "no code issued" all look the same to the caller.
    """

    def __init__(self) -> None:
        super().__init__("invalid or expired code")


class InvalidTransition(DomainError):
    """Tried to move a payment along an edge the state machine does not have."""

    def __init__(self, current: PaymentStatus, proposed: PaymentStatus) -> None:
        self.current = PaymentStatus(current)
        self.proposed = PaymentStatus(proposed)
        super().__init__(
            f"invalid payment status transition from {self.current.value} "
            f"to {self.proposed.value}"
        )


class ProtectedStateDeletion(DomainError):
    """Deletion attempted on a completed or refunded payment."""

    def __init__(self, status: PaymentStatus) -> None:
        self.status = PaymentStatus(status)
        super().__init__("cannot delete a completed or refunded payment")


class InvalidCredentials(DomainError):
    """Email/password pair does not match an account."""

    pass


class UserNotFound(DomainError):
    """No user matches the lookup criteria (e.g., email)."""

    pass


class UserAlreadyExists(DomainError):
    """User with the given identity already exists."""

    pass


class PaymentNotFound(DomainError):
    """No payment with the requested id."""

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"payment {payment_id} not found")
