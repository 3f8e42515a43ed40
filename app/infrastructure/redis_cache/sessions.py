from __future__ import annotations

import hashlib
import secrets
from typing import Optional

from redis.asyncio import Redis

from app.domain.ports.session_store import SessionStorePort


class RedisSessions(SessionStorePort):
    """
    Opaque bearer tokens -> user id, with a sliding TTL.

    Keys hold the SHA-256 of the token, so a Redis dump does not contain
    usable tokens.
    """

    def __init__(
        self, redis: Redis, *, key_prefix: str = "sess:", ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self._prefix}{digest}"

    async def create(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        await self._redis.set(self._key(token), user_id, ex=self._ttl)
        return token

    async def get(self, token: str) -> Optional[str]:
        # GETEX refreshes the expiry on every authenticated request
        return await self._redis.getex(self._key(token), ex=self._ttl)

    async def revoke(self, token: str) -> None:
        await self._redis.delete(self._key(token))
