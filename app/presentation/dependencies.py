from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.domain.code_vault import CodeVault
from app.domain.ports.session_store import SessionStorePort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.infrastructure.code_store.memory import InMemoryCodeStore
from app.infrastructure.db.pool import get_pool
from app.infrastructure.db.uow import PgUnitOfWork
from app.infrastructure.redis_cache.pool import get_redis
from app.infrastructure.redis_cache.sessions import RedisSessions
from app.infrastructure.security.password import (
    hash_password,
    password_needs_rehash,
    verify_password,
)
from app.settings import get_settings


def get_uow() -> UnitOfWorkPort:
    return PgUnitOfWork(get_pool())


@lru_cache(maxsize=1)
def get_code_vault() -> CodeVault:
    """Process-wide vault; every request must see the same codes."""
    settings = get_settings()
    return CodeVault(
        InMemoryCodeStore(),
        ttl=timedelta(seconds=settings.code_ttl_seconds),
        code_length=settings.code_length,
        lock_stripes=settings.code_lock_stripes,
    )


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, str], bool]:
    return verify_password


def get_needs_rehash() -> Callable[[str], bool]:
    return password_needs_rehash


def get_code_ttl_minutes() -> int:
    return max(1, get_settings().code_ttl_seconds // 60)


def get_sessions() -> SessionStorePort:
    return RedisSessions(get_redis(), ttl_seconds=get_settings().session_ttl_seconds)


bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Security(bearer_scheme)
    ],
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user_id(
    token: Annotated[str, Depends(get_bearer_token)],
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
) -> str:
    """User id behind a live session token, or 401."""
    user_id = await sessions.get(token)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
