"""
Outbox relay for one-time code emails.

Use cases write ``user.verification_code`` / ``user.password_reset_code``
rows in the same transaction as the user change; this worker claims due
rows, hands them to the email adapter and records the outcome:

    pending -> processing -> dispatched
                          -> pending (retry, exponential backoff)
                          -> dead    (attempts exhausted)

The email body carries the plain code, so it is dropped from the row once
the message is dispatched or dead-lettered.

A row stuck in ``processing`` longer than ``claim_lease`` (worker crashed
mid-batch) becomes claimable again.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from app.application.code_delivery import TOPIC_BY_PURPOSE
from app.domain.ports.email_port import EmailPort

logger = logging.getLogger("app.infrastructure.outbox.dispatcher")

EMAIL_TOPICS = frozenset(TOPIC_BY_PURPOSE.values())

_CLAIM_SQL = """
WITH due AS (
    SELECT id
    FROM outbox
    WHERE (status = 'pending' AND COALESCE(next_attempt_at, NOW()) <= NOW())
       OR (status = 'processing'
           AND updated_at < NOW() - make_interval(secs => %(lease)s))
    ORDER BY created_at
    FOR UPDATE SKIP LOCKED
    LIMIT %(limit)s
)
UPDATE outbox o
SET status = 'processing', updated_at = NOW()
FROM due
WHERE o.id = due.id
RETURNING o.id, o.topic, o.payload, o.attempts
"""

_DISPATCHED_SQL = """
UPDATE outbox
SET status = 'dispatched',
    payload = payload - 'body',
    last_error = NULL,
    updated_at = NOW()
WHERE id = %(id)s
"""

_RETRY_SQL = """
UPDATE outbox
SET status = %(status)s,
    payload = CASE WHEN %(dead)s THEN payload - 'body' ELSE payload END,
    attempts = %(attempts)s,
    last_error = %(error)s,
    next_attempt_at = NOW() + make_interval(secs => %(delay)s),
    updated_at = NOW()
WHERE id = %(id)s
"""


@dataclass(frozen=True)
class RetryPolicy:
    base: int = 2  # seconds
    max_delay: int = 60  # seconds
    max_attempts: int = 10

    def compute_delay(self, attempts: int) -> int:
        """Delay before the next try, given how many tries already failed."""
        return min(self.max_delay, self.base * (2**attempts))

    def exhausted(self, attempts: int) -> bool:
        return attempts >= self.max_attempts


class OutboxDispatcher:
    def __init__(
        self,
        *,
        pool: AsyncConnectionPool,
        email_adapter: EmailPort,
        batch_size: int = 10,
        poll_interval: float = 1.0,
        retry_policy: RetryPolicy | None = None,
        claim_lease: float = 300.0,
    ) -> None:
        self.pool = pool
        self.email_adapter = email_adapter
        self.batch_size = batch_size
        self.poll_interval = poll_interval
        self.retry_policy = retry_policy or RetryPolicy()
        self.claim_lease = claim_lease

    async def run_forever(self) -> None:
        logger.info(
            "outbox dispatcher started",
            extra={"batch_size": self.batch_size, "poll_interval": self.poll_interval},
        )
        while True:
            if await self.process_once() == 0:
                await asyncio.sleep(self.poll_interval)

    async def process_once(self) -> int:
        """Claim one batch and settle every row in it. Returns the batch size."""
        batch = await self._fetch_and_claim()
        if batch:
            logger.info("outbox batch claimed", extra={"count": len(batch)})
        for msg in batch:
            await self._settle(msg)
        return len(batch)

    async def dispatch(self, topic: str, payload: dict[str, Any]) -> None:
        if topic not in EMAIL_TOPICS:
            # left to fail so it stays visible in the table
            raise RuntimeError(f"unknown topic: {topic}")
        await self.email_adapter.send(
            to=payload["to"],
            subject=payload["subject"],
            body=payload["body"],
            idempotency_key=payload.get("idempotency_key"),
        )

    async def _settle(self, msg: dict[str, Any]) -> None:
        try:
            await self.dispatch(msg["topic"], msg["payload"])
        except Exception as e:  # noqa: BLE001
            attempts = msg["attempts"] + 1
            dead = self.retry_policy.exhausted(attempts)
            delay = self.retry_policy.compute_delay(msg["attempts"])
            log = logger.error if dead else logger.warning
            message = "outbox message dead-lettered" if dead else "dispatch failed"
            log(
                message,
                extra={
                    "id": msg["id"],
                    "topic": msg["topic"],
                    "attempts": attempts,
                    "retry_in_s": None if dead else delay,
                },
            )
            await self._execute(
                _RETRY_SQL,
                {
                    "id": msg["id"],
                    "status": "dead" if dead else "pending",
                    "dead": dead,
                    "attempts": attempts,
                    "error": str(e)[:1000],
                    "delay": delay,
                },
            )
        else:
            await self._execute(_DISPATCHED_SQL, {"id": msg["id"]})

    async def _fetch_and_claim(self) -> list[dict[str, Any]]:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(
                        _CLAIM_SQL,
                        {"limit": self.batch_size, "lease": self.claim_lease},
                    )
                    rows = await cur.fetchall()
        return sorted(rows, key=lambda r: r["id"])

    async def _execute(self, sql: str, params: dict[str, Any]) -> None:
        async with self.pool.connection() as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await cur.execute(sql, params)
