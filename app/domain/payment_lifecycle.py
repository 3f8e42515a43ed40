"""
Payment status state machine.

    pending    -> processing, failed, completed
    processing -> completed, failed
    completed  -> refunded
    failed     -> pending
    refunded   -> (terminal)

``pending -> completed`` covers cash and wallet payments that settle without
a processing step; ``failed -> pending`` is the retry edge.

Every function here is pure; nothing is locked or persisted.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from app.domain.enums import PaymentStatus
from app.domain.errors import InvalidTransition

logger = logging.getLogger(__name__)

PAYMENT_TRANSITIONS: Mapping[PaymentStatus, frozenset[PaymentStatus]] = (
    MappingProxyType(
        {
            PaymentStatus.PENDING: frozenset(
                {
                    PaymentStatus.PROCESSING,
                    PaymentStatus.FAILED,
                    PaymentStatus.COMPLETED,
                }
            ),
            PaymentStatus.PROCESSING: frozenset(
                {PaymentStatus.COMPLETED, PaymentStatus.FAILED}
            ),
            PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
            PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING}),
            PaymentStatus.REFUNDED: frozenset(),
        }
    )
)

PROTECTED_FROM_DELETION: frozenset[PaymentStatus] = frozenset(
    {PaymentStatus.COMPLETED, PaymentStatus.REFUNDED}
)

_missing = set(PaymentStatus) - set(PAYMENT_TRANSITIONS)
if _missing:
    missing_names = sorted(s.value for s in _missing)
    raise RuntimeError(f"payment transition table has no entry for: {missing_names}")


def allowed_transitions(current: PaymentStatus) -> frozenset[PaymentStatus]:
    return PAYMENT_TRANSITIONS[PaymentStatus(current)]


def can_transition(current: PaymentStatus, proposed: PaymentStatus) -> bool:
    """
    True iff ``proposed`` is an outgoing edge of ``current``.

    A status never transitions to itself; callers that want a same-status
    update to be a no-op must check for it before asking.
    """
    return PaymentStatus(proposed) in allowed_transitions(current)


def assert_transition(current: PaymentStatus, proposed: PaymentStatus) -> None:
    if not can_transition(current, proposed):
        logger.warning(
            "rejected payment status transition",
            extra={
                "current": PaymentStatus(current).value,
                "proposed": PaymentStatus(proposed).value,
            },
        )
        raise InvalidTransition(current, proposed)


def can_delete(status: PaymentStatus) -> bool:
    return PaymentStatus(status) not in PROTECTED_FROM_DELETION


def is_terminal(status: PaymentStatus) -> bool:
    return not allowed_transitions(status)
