import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.application.create_payment import create_payment
from app.application.delete_payment import delete_payment
from app.application.payment_queries import (
    get_payment,
    list_payments,
    payment_analytics,
    pending_payouts,
    revenue_by_period,
)
from app.application.update_payment import update_payment
from app.domain.enums import PaymentStatus, RevenuePeriod
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.presentation.dependencies import get_current_user_id, get_uow
from app.schemas.requests import PaymentCreateIn, PaymentUpdateIn
from app.schemas.responses import PaymentAnalyticsOut, PaymentOut, RevenueOut

router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
    dependencies=[Depends(get_current_user_id)],
)

UoW = Annotated[UnitOfWorkPort, Depends(get_uow)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PaymentOut)
async def post_payment(body: PaymentCreateIn, uow: UoW):
    payment = await create_payment(
        uow,
        amount=body.amount,
        method=body.method,
        ride_id=body.ride_id,
        user_id=str(body.user_id),
        transaction_id=body.transaction_id,
        description=body.description,
    )
    return PaymentOut.from_payment(payment)


@router.get("", response_model=list[PaymentOut])
async def get_payments(
    uow: UoW,
    user_id: uuid.UUID | None = None,
    ride_id: str | None = None,
    status: PaymentStatus | None = None,
):
    payments = await list_payments(
        uow,
        user_id=str(user_id) if user_id is not None else None,
        ride_id=ride_id,
        status=status,
    )
    return [PaymentOut.from_payment(p) for p in payments]


@router.get("/analytics", response_model=PaymentAnalyticsOut)
async def get_payments_analytics(
    uow: UoW, start: datetime | None = None, end: datetime | None = None
):
    summary = await payment_analytics(uow, start=start, end=end)
    return PaymentAnalyticsOut.from_summary(summary)


@router.get("/revenue/period", response_model=RevenueOut)
async def get_revenue_by_period(uow: UoW, period: RevenuePeriod = RevenuePeriod.DAY):
    return RevenueOut.from_report(await revenue_by_period(uow, period))


@router.get("/payouts/pending", response_model=list[PaymentOut])
async def get_pending_payouts(uow: UoW):
    return [PaymentOut.from_payment(p) for p in await pending_payouts(uow)]


@router.get("/{payment_id}", response_model=PaymentOut)
async def get_payment_by_id(payment_id: uuid.UUID, uow: UoW):
    return PaymentOut.from_payment(await get_payment(uow, str(payment_id)))


@router.patch("/{payment_id}", response_model=PaymentOut)
async def patch_payment(payment_id: uuid.UUID, body: PaymentUpdateIn, uow: UoW):
    payment = await update_payment(
        uow,
        str(payment_id),
        status=body.status,
        transaction_id=body.transaction_id,
        description=body.description,
    )
    return PaymentOut.from_payment(payment)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_by_id(payment_id: uuid.UUID, uow: UoW):
    await delete_payment(uow, str(payment_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
