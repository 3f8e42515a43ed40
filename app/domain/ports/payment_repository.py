from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from app.domain.entities import Payment
from app.domain.enums import PaymentStatus


class PaymentRepositoryPort(Protocol):
    async def create(self, payment: Payment) -> Payment:
        """
        Insert the payment and return it with id/timestamps filled in.
        Raises UserNotFound when user_id references no user.
        """

    async def get_for_update(self, payment_id: str) -> Optional[Payment]:
        """
        Fetch a payment and lock the row for update (transaction-scoped).
        Return None if not found.
        """

    async def get(self, payment_id: str) -> Optional[Payment]:
        """Fetch a payment without locking. Return None if not found."""

    async def list(
        self,
        *,
        user_id: str | None = None,
        ride_id: str | None = None,
        status: PaymentStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[Payment]:
        """
        Payments matching every given filter, newest first. The created_at
        window is inclusive on both ends; either bound may be omitted.
        """

    async def save(self, payment: Payment) -> Payment:
        """Persist status/transaction_id/description of an existing payment."""

    async def delete(self, payment_id: str) -> None:
        """Remove the payment row."""
