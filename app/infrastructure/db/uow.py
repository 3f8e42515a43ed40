from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Optional

import psycopg
from psycopg_pool import AsyncConnectionPool

from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.infrastructure.db.outbox_repo import PgOutboxRepository
from app.infrastructure.db.payments_repo import PgPaymentRepository
from app.infrastructure.db.users_repo import PgUserRepository

logger = logging.getLogger(__name__)


class PgUnitOfWork(UnitOfWorkPort):
    """
    One pooled connection per ``async with`` block. Repositories share it;
    anything not explicitly committed is rolled back on exit.
    """

    db_users: PgUserRepository
    payments: PgPaymentRepository
    outbox: PgOutboxRepository

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._lease: Optional[AbstractAsyncContextManager] = None
        self._conn: Optional[psycopg.AsyncConnection] = None
        self._committed = False

    async def __aenter__(self) -> "PgUnitOfWork":
        if self._conn is not None:
            raise RuntimeError("unit of work is already in progress")
        self._lease = self._pool.connection()
        conn = await self._lease.__aenter__()
        self._conn = conn
        self._committed = False
        self.db_users = PgUserRepository(conn)
        self.payments = PgPaymentRepository(conn)
        self.outbox = PgOutboxRepository(conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        lease, conn = self._lease, self._conn
        self._lease = self._conn = None
        try:
            if conn is not None and not self._committed:
                try:
                    await conn.rollback()
                except psycopg.Error:
                    logger.warning("rollback failed", exc_info=True)
        finally:
            if lease is not None:
                await lease.__aexit__(exc_type, exc_value, traceback)

    async def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("commit() outside of a unit of work")
        await self._conn.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()
        self._committed = False
