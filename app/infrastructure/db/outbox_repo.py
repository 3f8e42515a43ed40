from __future__ import annotations

import psycopg
from psycopg.types.json import Json

from app.domain.ports.outbox_repository import OutboxRepositoryPort


class PgOutboxRepository(OutboxRepositoryPort):
    """
    Postgres implementation of the Outbox repo, bound to an *active async connection*.
    This class DOES NOT COMMIT; the caller (UoW) controls transactions.
    Rows are claimed and retried by app.infrastructure.outbox.dispatcher.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def enqueue(
        self, *, topic: str, payload: dict, idempotency_key: str | None = None
    ) -> str:
        """
        Insert a pending message. With an idempotency key, a second enqueue
        of the same key returns the existing row's id instead of duplicating.
        """
        sql = """
        WITH ins AS (
            INSERT INTO outbox (topic, payload, status, idempotency_key)
            VALUES (%s, %s, 'pending', %s)
            ON CONFLICT (idempotency_key) DO NOTHING
            RETURNING id
        )
        SELECT id FROM ins
        UNION ALL
        SELECT id FROM outbox
        WHERE idempotency_key = %s AND NOT EXISTS (SELECT 1 FROM ins)
        LIMIT 1
        """
        async with self._conn.cursor() as cur:
            await cur.execute(
                sql, (topic, Json(payload), idempotency_key, idempotency_key)
            )
            row = await cur.fetchone()
        if not row:
            raise RuntimeError("outbox enqueue returned no row")
        return str(row[0])
