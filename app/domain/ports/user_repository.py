from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from app.domain.entities import User


class UserRepositoryPort(Protocol):
    async def create(self, user: User, password_hash: str) -> User:
        """
        Insert a new user (email_verified=False) and return it with its id.
        Raise UserAlreadyExists if the email is taken.
        """

    async def get_by_email(self, email: str) -> Optional[User]:
        """Fetch user by normalized email. Return None if not found."""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Fetch user by id. Return None if not found."""

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str] | None:
        """Fetch user and its password hash. Return None if not found."""

    async def set_email_verified(self, user_id: str) -> None:
        """Mark the user's email as verified."""

    async def update_password(self, user_id: str, password_hash: str) -> None:
        """Replace the stored password hash."""

    async def set_last_login_at(self, user_id: str, when: datetime) -> None:
        """Record a successful login."""
