import logging

from app.domain.errors import PaymentNotFound
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def delete_payment(uow: UnitOfWorkPort, payment_id: str) -> None:
    async with uow as transaction:
        payment = await transaction.payments.get_for_update(payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)
        payment.ensure_deletable()
        await transaction.payments.delete(payment_id)
        await transaction.commit()
    logger.info("payment deleted", extra={"payment_id": payment_id})
