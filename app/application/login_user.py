import logging
from datetime import datetime, timezone
from typing import Callable

from app.domain.errors import InvalidCredentials
from app.domain.ports.session_store import SessionStorePort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import normalize_email

logger = logging.getLogger(__name__)


async def login_user(
    uow: UnitOfWorkPort,
    sessions: SessionStorePort,
    email: str,
    password: str,
    verify_password: Callable[[str, str], bool],
    hash_password: Callable[..., str] | None = None,
    needs_rehash: Callable[[str], bool] | None = None,
) -> str:
    """
    Check credentials and open a session. Returns the bearer token.

    When both hash_password and needs_rehash are given, a hash made with an
    outdated cost is replaced while the plain password is at hand.
    """
    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(
            normalize_email(email)
        )
        if not record:
            raise InvalidCredentials()
        user, password_hash = record
        if not verify_password(password, password_hash):
            raise InvalidCredentials()

        if hash_password and needs_rehash and needs_rehash(password_hash):
            await transaction.db_users.update_password(
                user.id, hash_password(password)
            )
            logger.info("password rehashed", extra={"user_id": user.id})

        token = await sessions.create(user.id)
        await transaction.db_users.set_last_login_at(
            user.id, datetime.now(timezone.utc)
        )
        await transaction.commit()
    return token
