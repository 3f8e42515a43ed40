from __future__ import annotations

from typing import Iterator, Optional

from app.domain.entities import VerificationRecord
from app.domain.ports.code_store import CodeStorePort


class InMemoryCodeStore(CodeStorePort):
    """
    Process-local dict of subject -> record.

    Single dict operations are atomic under the GIL; compound
    read-then-write sequences are serialised by CodeVault's lock stripes.
    """

    def __init__(self) -> None:
        self._records: dict[str, VerificationRecord] = {}

    def get(self, subject: str) -> Optional[VerificationRecord]:
        return self._records.get(subject)

    def put(self, record: VerificationRecord) -> None:
        self._records[record.subject] = record

    def delete(self, subject: str) -> None:
        self._records.pop(subject, None)

    def items(self) -> Iterator[tuple[str, VerificationRecord]]:
        return iter(list(self._records.items()))

    def __len__(self) -> int:
        return len(self._records)
