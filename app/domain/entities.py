from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.domain import payment_lifecycle
from app.domain.enums import CodePurpose, PaymentMethod, PaymentStatus, UserRole
from app.domain.errors import ProtectedStateDeletion


@dataclass
class User:
    id: str | None = None
    email: str | None = None
    full_name: str = ""
    phone_number: str = ""
    role: UserRole = UserRole.RIDER
    email_verified: bool = False
    last_login_at: datetime | None = None

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")
        self.role = UserRole(self.role)

    def mark_verified(self) -> None:
        self.email_verified = True


@dataclass(frozen=True)
class VerificationRecord:
    """
    A live one-time code. Only the salted digest of the code is kept.
    """

    subject: str
    salt_b64: str
    digest_b64: str
    purpose: CodePurpose
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass
class Payment:
    id: str | None = None
    amount: Decimal = Decimal("0")
    method: PaymentMethod = PaymentMethod.CASH
    status: PaymentStatus = PaymentStatus.PENDING
    ride_id: str | None = None
    user_id: str | None = None
    transaction_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        self.amount = Decimal(str(self.amount))
        if self.amount < 0:
            raise ValueError("amount cannot be negative")
        self.method = PaymentMethod(self.method)
        self.status = PaymentStatus(self.status)

    def transition_to(self, new_status: PaymentStatus) -> None:
        """Move to *new_status* if the state machine allows it, else raise."""
        new_status = PaymentStatus(new_status)
        payment_lifecycle.assert_transition(self.status, new_status)
        self.status = new_status

    def ensure_deletable(self) -> None:
        if not payment_lifecycle.can_delete(self.status):
            raise ProtectedStateDeletion(self.status)
