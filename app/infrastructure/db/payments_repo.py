from __future__ import annotations

from datetime import datetime
from typing import Optional

import psycopg
from psycopg import errors as pg_errors

from app.domain.entities import Payment
from app.domain.enums import PaymentStatus
from app.domain.errors import UserNotFound
from app.domain.ports.payment_repository import PaymentRepositoryPort

_PAYMENT_COLUMNS = (
    "id, amount, method, status, ride_id, user_id, "
    "transaction_id, description, created_at, updated_at"
)


def _row_to_payment(row: tuple) -> Payment:
    (
        id_,
        amount,
        method,
        status,
        ride_id,
        user_id,
        transaction_id,
        description,
        created_at,
        updated_at,
    ) = row
    return Payment(
        id=str(id_),
        amount=amount,
        method=method,
        status=status,
        ride_id=str(ride_id),
        user_id=str(user_id),
        transaction_id=transaction_id,
        description=description,
        created_at=created_at,
        updated_at=updated_at,
    )


class PgPaymentRepository(PaymentRepositoryPort):
    """
    Postgres payments table. Bound to the UoW's connection; never commits.

    Status values are written as-is; legality is decided by the domain
    before save() is reached.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def create(self, payment: Payment) -> Payment:
        sql = f"""
        INSERT INTO payments
            (amount, method, status, ride_id, user_id, transaction_id, description)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING {_PAYMENT_COLUMNS}
        """
        params = (
            payment.amount,
            payment.method.value,
            payment.status.value,
            payment.ride_id,
            payment.user_id,
            payment.transaction_id,
            payment.description,
        )
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, params)
                row = await cur.fetchone()
        except pg_errors.ForeignKeyViolation as e:
            raise UserNotFound() from e
        if not row:
            raise RuntimeError("create payment returned no row")
        return _row_to_payment(row)

    async def get_for_update(self, payment_id: str) -> Optional[Payment]:
        sql = f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE id = %s FOR UPDATE"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (payment_id,))
            row = await cur.fetchone()
        return _row_to_payment(row) if row else None

    async def get(self, payment_id: str) -> Optional[Payment]:
        sql = f"SELECT {_PAYMENT_COLUMNS} FROM payments WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (payment_id,))
            row = await cur.fetchone()
        return _row_to_payment(row) if row else None

    async def list(
        self,
        *,
        user_id: str | None = None,
        ride_id: str | None = None,
        status: PaymentStatus | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[Payment]:
        clauses: list[str] = []
        params: list[object] = []
        if user_id is not None:
            clauses.append("user_id = %s")
            params.append(user_id)
        if ride_id is not None:
            clauses.append("ride_id = %s")
            params.append(ride_id)
        if status is not None:
            clauses.append("status = %s")
            params.append(PaymentStatus(status).value)
        if created_from is not None:
            clauses.append("created_at >= %s")
            params.append(created_from)
        if created_to is not None:
            clauses.append("created_at <= %s")
            params.append(created_to)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = f"""
        SELECT {_PAYMENT_COLUMNS}
        FROM payments
        {where}
        ORDER BY created_at DESC
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, params)
            rows = await cur.fetchall()
        return [_row_to_payment(r) for r in rows]

    async def save(self, payment: Payment) -> Payment:
        sql = f"""
        UPDATE payments
        SET status = %s,
            transaction_id = %s,
            description = %s,
            updated_at = now()
        WHERE id = %s
        RETURNING {_PAYMENT_COLUMNS}
        """
        params = (
            payment.status.value,
            payment.transaction_id,
            payment.description,
            payment.id,
        )
        async with self._conn.cursor() as cur:
            await cur.execute(sql, params)
            row = await cur.fetchone()
        if not row:
            raise RuntimeError(f"payment {payment.id} vanished during update")
        return _row_to_payment(row)

    async def delete(self, payment_id: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute("DELETE FROM payments WHERE id = %s", (payment_id,))
