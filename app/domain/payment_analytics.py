from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable

from app.domain.entities import Payment
from app.domain.enums import PaymentStatus, RevenuePeriod


@dataclass
class PaymentSummary:
    total_payments: int = 0
    total_revenue: Decimal = Decimal("0")
    average_payment: Decimal = Decimal("0")
    count_by_status: dict[PaymentStatus, int] = field(default_factory=dict)
    amount_by_status: dict[PaymentStatus, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class RevenueReport:
    period: RevenuePeriod
    start: datetime
    end: datetime
    total_revenue: Decimal
    transaction_count: int
    average_transaction: Decimal


def summarize_payments(payments: Iterable[Payment]) -> PaymentSummary:
    """
    Revenue only counts completed payments; the average is taken over
    completed payments as well.
    """
    summary = PaymentSummary(
        count_by_status={s: 0 for s in PaymentStatus},
        amount_by_status={s: Decimal("0") for s in PaymentStatus},
    )
    for payment in payments:
        summary.total_payments += 1
        summary.count_by_status[payment.status] += 1
        summary.amount_by_status[payment.status] += payment.amount

    completed = summary.count_by_status[PaymentStatus.COMPLETED]
    summary.total_revenue = summary.amount_by_status[PaymentStatus.COMPLETED]
    if completed:
        summary.average_payment = summary.total_revenue / completed
    return summary


def _months_back(moment: datetime, months: int) -> datetime:
    # Jan 31 minus one month is Dec 31; Mar 31 minus one month is Feb 28/29.
    index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: RevenuePeriod, now: datetime) -> datetime:
    """
    DAY starts at midnight of the current day, the others reach back one
    week, one calendar month or one calendar year from now.
    """
    period = RevenuePeriod(period)
    if period is RevenuePeriod.DAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is RevenuePeriod.WEEK:
        return now - timedelta(days=7)
    if period is RevenuePeriod.MONTH:
        return _months_back(now, 1)
    return _months_back(now, 12)


def summarize_revenue(
    payments: Iterable[Payment],
    period: RevenuePeriod,
    start: datetime,
    end: datetime,
) -> RevenueReport:
    """Totals over the completed payments among `payments`."""
    amounts = [p.amount for p in payments if p.status is PaymentStatus.COMPLETED]
    total = sum(amounts, Decimal("0"))
    average = total / len(amounts) if amounts else Decimal("0")
    return RevenueReport(
        period=RevenuePeriod(period),
        start=start,
        end=end,
        total_revenue=total,
        transaction_count=len(amounts),
        average_transaction=average,
    )
