from decimal import Decimal

from app.domain.entities import Payment
from app.domain.enums import PaymentMethod, PaymentStatus
from app.domain.ports.unit_of_work import UnitOfWorkPort


async def create_payment(
    uow: UnitOfWorkPort,
    *,
    amount: Decimal,
    method: PaymentMethod,
    ride_id: str,
    user_id: str,
    transaction_id: str | None = None,
    description: str | None = None,
) -> Payment:
    """Every payment starts out pending; status only changes through updates."""
    payment = Payment(
        amount=amount,
        method=method,
        status=PaymentStatus.PENDING,
        ride_id=ride_id,
        user_id=user_id,
        transaction_id=transaction_id,
        description=description,
    )
    async with uow as transaction:
        created = await transaction.payments.create(payment)
        await transaction.commit()
    return created
