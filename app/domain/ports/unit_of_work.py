from __future__ import annotations

from types import TracebackType
from typing import Protocol

from app.domain.ports.outbox_repository import OutboxRepositoryPort
from app.domain.ports.payment_repository import PaymentRepositoryPort
from app.domain.ports.user_repository import UserRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    A single database transaction shared by the repositories it exposes.

        async with uow as tx:
            payment = await tx.payments.get_for_update(payment_id)
            payment.transition_to(PaymentStatus.COMPLETED)
            await tx.payments.save(payment)
            await tx.commit()

    Leaving the block without ``commit()`` rolls everything back.
    """

    db_users: UserRepositoryPort
    payments: PaymentRepositoryPort
    outbox: OutboxRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
