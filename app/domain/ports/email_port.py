from __future__ import annotations

from typing import Protocol


class EmailPort(Protocol):
    """
    Outbound mail used by the outbox dispatcher to deliver one-time codes.

    Implementations raise on any delivery failure; the dispatcher turns the
    exception into a rescheduled retry.
    """

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None: ...
