from typing import Optional, Protocol


class SessionStorePort(Protocol):
    async def create(self, user_id: str) -> str:
        """Open a session for user_id and return its opaque token."""

    async def get(self, token: str) -> Optional[str]:
        """Return the user id bound to token, or None if unknown/expired."""

    async def revoke(self, token: str) -> None:
        """Forget the token."""
