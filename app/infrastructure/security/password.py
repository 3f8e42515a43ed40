from __future__ import annotations

from passlib.context import CryptContext

from app.settings import get_settings

# One global context; bcrypt is the only scheme we use.
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str, *, rounds: int | None = None) -> str:
    """
    Hash a password using bcrypt. If rounds is None, use settings.bcrypt_rounds.
    """
    if rounds is None:
        rounds = int(get_settings().bcrypt_rounds)
    return _pwd.hash(plain, rounds=rounds)


def verify_password(plain: str, password_hash: str) -> bool:
    """
    Verify a password against its bcrypt hash (safe timing).
    Malformed hashes count as a mismatch.
    """
    try:
        return _pwd.verify(plain, password_hash)
    except ValueError:
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """True when the hash was made with a different cost than bcrypt_rounds."""
    try:
        rounds = int(password_hash.split("$")[2])
    except (IndexError, ValueError):
        return True
    return rounds != int(get_settings().bcrypt_rounds)
