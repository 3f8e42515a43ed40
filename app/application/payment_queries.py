import logging
from datetime import datetime

from app.domain.clock import Clock, as_utc, utc_now
from app.domain.entities import Payment
from app.domain.enums import PaymentStatus, RevenuePeriod
from app.domain.errors import PaymentNotFound
from app.domain.payment_analytics import (
    PaymentSummary,
    RevenueReport,
    period_start,
    summarize_payments,
    summarize_revenue,
)
from app.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def get_payment(uow: UnitOfWorkPort, payment_id: str) -> Payment:
    async with uow as transaction:
        payment = await transaction.payments.get(payment_id)
    if payment is None:
        raise PaymentNotFound(payment_id)
    return payment


async def list_payments(
    uow: UnitOfWorkPort,
    *,
    user_id: str | None = None,
    ride_id: str | None = None,
    status: PaymentStatus | None = None,
) -> list[Payment]:
    async with uow as transaction:
        return await transaction.payments.list(
            user_id=user_id, ride_id=ride_id, status=status
        )


async def payment_analytics(
    uow: UnitOfWorkPort,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> PaymentSummary:
    """
    Summary over payments created in [start, end]; either bound may be open.
    Bounds without a timezone are read as UTC.
    """
    created_from = as_utc(start) if start is not None else None
    created_to = as_utc(end) if end is not None else None
    async with uow as transaction:
        payments = await transaction.payments.list(
            created_from=created_from, created_to=created_to
        )
    return summarize_payments(payments)


async def revenue_by_period(
    uow: UnitOfWorkPort,
    period: RevenuePeriod = RevenuePeriod.DAY,
    *,
    clock: Clock = utc_now,
) -> RevenueReport:
    end = as_utc(clock())
    start = period_start(period, end)
    async with uow as transaction:
        payments = await transaction.payments.list(
            status=PaymentStatus.COMPLETED, created_from=start, created_to=end
        )
    report = summarize_revenue(payments, period, start, end)
    logger.info(
        "revenue report built",
        extra={"period": report.period.value, "count": report.transaction_count},
    )
    return report


async def pending_payouts(uow: UnitOfWorkPort) -> list[Payment]:
    """Completed payments, newest first."""
    async with uow as transaction:
        return await transaction.payments.list(status=PaymentStatus.COMPLETED)
