from __future__ import annotations

from datetime import datetime
from typing import Optional

import psycopg
from psycopg import errors as pg_errors

from app.domain.entities import User
from app.domain.errors import UserAlreadyExists
from app.domain.ports.user_repository import UserRepositoryPort

_USER_COLUMNS = (
    "id, email, full_name, phone_number, role, email_verified, last_login_at"
)


def _row_to_user(row: tuple) -> User:
    id_, email, full_name, phone_number, role, email_verified, last_login_at = row
    return User(
        id=str(id_),
        email=str(email),
        full_name=full_name or "",
        phone_number=phone_number or "",
        role=role,
        email_verified=bool(email_verified),
        last_login_at=last_login_at,
    )


class PgUserRepository(UserRepositoryPort):
    """
    Postgres implementation of UserRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def create(self, user: User, password_hash: str) -> User:
        sql = f"""
        INSERT INTO users (email, password_hash, full_name, phone_number, role)
        VALUES (LOWER(TRIM(%s)), %s, %s, %s, %s)
        RETURNING {_USER_COLUMNS}
        """
        params = (
            user.email,
            password_hash,
            user.full_name,
            user.phone_number,
            user.role.value,
        )
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, params)
                row = await cur.fetchone()
        except pg_errors.UniqueViolation as e:
            raise UserAlreadyExists() from e

        if not row:
            raise RuntimeError("create user returned no row")
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = LOWER(TRIM(%s))"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_id(self, user_id: str) -> Optional[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))
            row = await cur.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str] | None:
        sql = f"""
        SELECT {_USER_COLUMNS}, password_hash
        FROM users
        WHERE email = LOWER(TRIM(%s))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        return _row_to_user(row[:-1]), row[-1]

    async def set_email_verified(self, user_id: str) -> None:
        sql = """
        UPDATE users
        SET email_verified = TRUE, updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (user_id,))

    async def update_password(self, user_id: str, password_hash: str) -> None:
        sql = """
        UPDATE users
        SET password_hash = %s, updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (password_hash, user_id))

    async def set_last_login_at(self, user_id: str, when: datetime) -> None:
        sql = "UPDATE users SET last_login_at = %s WHERE id = %s"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (when, user_id))
