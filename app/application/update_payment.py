import logging

from app.domain.entities import Payment
from app.domain.enums import PaymentStatus
from app.domain.errors import PaymentNotFound
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def update_payment(
    uow: UnitOfWorkPort,
    payment_id: str,
    *,
    status: PaymentStatus | None = None,
    transaction_id: str | None = None,
    description: str | None = None,
) -> Payment:
    """
    Apply a partial update.

    A status equal to the current one is an idempotent no-op for the status
    field: the state machine is not consulted (it has no self edges) and the
    remaining fields are still applied.
    """
    async with uow as transaction:
        payment = await transaction.payments.get_for_update(payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)

        if status is not None:
            status = PaymentStatus(status)
            if status == payment.status:
                logger.info(
                    "payment status unchanged",
                    extra={"payment_id": payment_id, "status": status.value},
                )
            else:
                previous = payment.status
                payment.transition_to(status)
                logger.info(
                    "payment status changed",
                    extra={
                        "payment_id": payment_id,
                        "from": previous.value,
                        "to": status.value,
                    },
                )

        if transaction_id is not None:
            payment.transaction_id = transaction_id
        if description is not None:
            payment.description = description

        saved = await transaction.payments.save(payment)
        await transaction.commit()
    return saved
