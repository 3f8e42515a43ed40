from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from app.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def get_pool() -> AsyncConnectionPool:
    """
    Process-wide pool, created closed. The API lifespan and the outbox
    worker each open it on startup and close it with close_pool().
    """
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = AsyncConnectionPool(
            settings.database_url,
            min_size=1,
            max_size=settings.db_pool_max_size,
            timeout=5,
            kwargs={"connect_timeout": 3},
            # a connection dropped by Postgres is replaced, not handed out
            check=AsyncConnectionPool.check_connection,
            open=False,
        )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
