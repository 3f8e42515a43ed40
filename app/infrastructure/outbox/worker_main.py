"""
Outbox worker process: ``python -m app.infrastructure.outbox.worker_main``
(or the ``ride-outbox-worker`` console script). Runs until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from app.infrastructure.db.pool import close_pool, get_pool
from app.infrastructure.email.http_smtp_adapter import HttpSmtpEmailAdapter
from app.infrastructure.outbox.dispatcher import OutboxDispatcher, RetryPolicy
from app.logging import setup_logging
from app.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_dispatcher(settings: Settings, pool, email) -> OutboxDispatcher:
    return OutboxDispatcher(
        pool=pool,
        email_adapter=email,
        batch_size=settings.outbox_batch_size,
        poll_interval=settings.outbox_poll_interval_ms / 1000,
        retry_policy=RetryPolicy(
            base=2, max_delay=300, max_attempts=settings.outbox_max_attempts
        ),
    )


async def _run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    pool = get_pool()
    await pool.open()
    email = HttpSmtpEmailAdapter(
        base_url=settings.smtp_base_url, sender=settings.email_sender
    )
    dispatcher = build_dispatcher(settings, pool, email)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    task = asyncio.create_task(dispatcher.run_forever())
    logger.info("outbox worker running")
    try:
        await stop.wait()
        logger.info("outbox worker stopping")
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        await email.aclose()
        await close_pool()
    logger.info("outbox worker stopped")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
