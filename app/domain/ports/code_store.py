from typing import Iterator, Optional, Protocol

from app.domain.entities import VerificationRecord


class CodeStorePort(Protocol):
    """
    Key/value storage for verification records, keyed by subject.

    Implementations need not be thread-safe for the same key; CodeVault
    serialises per-subject access before calling in.
    """

    def get(self, subject: str) -> Optional[VerificationRecord]:
        """Return the stored record or None."""

    def put(self, record: VerificationRecord) -> None:
        """Store/replace the record for record.subject."""

    def delete(self, subject: str) -> None:
        """Remove the record if present."""

    def items(self) -> Iterator[tuple[str, VerificationRecord]]:
        """Snapshot of (subject, record) pairs, safe to iterate while mutating."""
