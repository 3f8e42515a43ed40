"""Pure helpers for one-time codes and identifiers."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

SALT_BYTES = 16


def generate_numeric_code(length: int = 6) -> str:
    """
    Fixed-width decimal code from the OS CSPRNG.

    The first digit is never ``0`` so the code survives being parsed as an
    integer and re-rendered; that leaves 9 * 10**(length-1) equally likely
    values.
    """
    if length < 1:
        raise ValueError("code length must be positive")
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10**length - low))


def _digest(salt: bytes, code: str) -> bytes:
    return hashlib.sha256(salt + code.encode("utf-8")).digest()


def make_code_digest(code: str) -> tuple[str, str]:
    """Salt and hash *code*; returns ``(salt_b64, digest_b64)``."""
    salt = secrets.token_bytes(SALT_BYTES)
    return (
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(_digest(salt, code)).decode("ascii"),
    )


def verify_code_digest(code: str, salt_b64: str, digest_b64: str) -> bool:
    try:
        salt = base64.b64decode(salt_b64, validate=True)
        expected = base64.b64decode(digest_b64, validate=True)
    except (binascii.Error, ValueError):
        return False
    return hmac.compare_digest(_digest(salt, code), expected)


def normalize_email(email: str) -> str:
    return email.strip().lower()
