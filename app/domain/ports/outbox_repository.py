from __future__ import annotations

from typing import Protocol


class OutboxRepositoryPort(Protocol):
    async def enqueue(
        self, *, topic: str, payload: dict, idempotency_key: str | None = None
    ) -> str:
        """
        Enqueue a message into the outbox with status='pending'.
        Becomes visible to the dispatcher only once the transaction commits.
        """
