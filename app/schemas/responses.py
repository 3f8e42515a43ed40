from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import Payment, User
from app.domain.enums import PaymentMethod, PaymentStatus, RevenuePeriod, UserRole
from app.domain.payment_analytics import PaymentSummary, RevenueReport


class AcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"
    message: str


class OkOut(BaseModel):
    status: Literal["ok"] = "ok"
    message: str


class TokenOut(BaseModel):
    token: str
    token_type: Literal["bearer"] = "bearer"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="The id of the user")
    email: str = Field(..., description="The email of the user")
    full_name: str
    role: UserRole
    email_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls.model_validate(user)


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    ride_id: str
    user_id: str
    transaction_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentOut":
        return cls.model_validate(payment)


class PaymentAnalyticsOut(BaseModel):
    total_payments: int
    total_revenue: Decimal
    average_payment: Decimal
    payments_by_status: dict[PaymentStatus, int]
    revenue_by_status: dict[PaymentStatus, Decimal]

    @classmethod
    def from_summary(cls, summary: PaymentSummary) -> "PaymentAnalyticsOut":
        return cls(
            total_payments=summary.total_payments,
            total_revenue=summary.total_revenue,
            average_payment=summary.average_payment,
            payments_by_status=summary.count_by_status,
            revenue_by_status=summary.amount_by_status,
        )


class RevenueOut(BaseModel):
    period: RevenuePeriod
    start_date: datetime
    end_date: datetime
    total_revenue: Decimal
    transaction_count: int
    average_transaction: Decimal

    @classmethod
    def from_report(cls, report: RevenueReport) -> "RevenueOut":
        return cls(
            period=report.period,
            start_date=report.start,
            end_date=report.end,
            total_revenue=report.total_revenue,
            transaction_count=report.transaction_count,
            average_transaction=report.average_transaction,
        )
