from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Optional

from app.domain.code_vault import CodeVault

logger = logging.getLogger("app.infrastructure.code_store.sweeper")


class CodeSweeper:
    """
    Periodically drops expired verification codes.

    Expiry is always re-checked on lookup, so a missed sweep only costs
    memory, never correctness.
    """

    def __init__(self, vault: CodeVault, *, interval: float = 60.0) -> None:
        self.vault = vault
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def run_forever(self) -> None:
        logger.info("code sweeper started", extra={"interval": self.interval})
        while True:
            await asyncio.sleep(self.interval)
            self.sweep_once()

    def sweep_once(self) -> int:
        try:
            return self.vault.sweep_expired()
        except Exception:  # noqa: BLE001
            logger.exception("code sweep failed")
            return 0

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("code sweeper stopped")
