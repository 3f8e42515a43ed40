"""
One-time verification codes scoped to (subject, purpose).

A subject has at most one live code; issuing again replaces it. ``verify``
only reports, it never consumes: the caller invalidates once the code's
purpose has been carried out (the reset flow verifies twice before that).
"""

from __future__ import annotations

import logging
import threading
import zlib
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator

import app.domain.services as domain_services
from app.domain.clock import Clock, utc_now
from app.domain.entities import VerificationRecord
from app.domain.enums import CodePurpose
from app.domain.ports.code_store import CodeStorePort

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=10)


class CodeVault:
    def __init__(
        self,
        store: CodeStorePort,
        *,
        ttl: timedelta = DEFAULT_TTL,
        code_length: int = 6,
        lock_stripes: int = 64,
        clock: Clock = utc_now,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be >= 1")
        self._store = store
        self._ttl = ttl
        self._code_length = code_length
        self._clock = clock
        self._locks = [threading.Lock() for _ in range(lock_stripes)]

    def _lock_for(self, subject: str) -> threading.Lock:
        # stable across processes, unlike hash() on str
        return self._locks[zlib.crc32(subject.encode("utf-8")) % len(self._locks)]

    def issue(self, subject: str, purpose: CodePurpose) -> str:
        """Generate, store (replacing any previous code) and return a new code."""
        code, _ = self._issue(subject, purpose)
        return code

    @contextmanager
    def issuing(self, subject: str, purpose: CodePurpose) -> Iterator[str]:
        """
        Issue a code whose delivery is still to be arranged.

        If the block raises, the record that was live before is put back, so
        a code the subject already holds keeps working when the new one was
        never sent. A newer issue made meanwhile is left alone.
        """
        with self._lock_for(subject):
            previous = self._store.get(subject)
        code, record = self._issue(subject, purpose)
        try:
            yield code
        except BaseException:
            with self._lock_for(subject):
                if self._store.get(subject) == record:
                    if previous is None:
                        self._store.delete(subject)
                    else:
                        self._store.put(previous)
            logger.info(
                "verification code issue rolled back",
                extra={"purpose": record.purpose.value},
            )
            raise

    def _issue(
        self, subject: str, purpose: CodePurpose
    ) -> tuple[str, VerificationRecord]:
        purpose = CodePurpose(purpose)
        code = domain_services.generate_numeric_code(self._code_length)
        salt_b64, digest_b64 = domain_services.make_code_digest(code)
        now = self._clock()
        record = VerificationRecord(
            subject=subject,
            salt_b64=salt_b64,
            digest_b64=digest_b64,
            purpose=purpose,
            issued_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock_for(subject):
            self._store.put(record)
        logger.info(
            "verification code issued",
            extra={
                "purpose": purpose.value,
                "expires_at": record.expires_at.isoformat(),
            },
        )
        return code, record

    def verify(self, subject: str, code: str, purpose: CodePurpose) -> bool:
        with self._lock_for(subject):
            record = self._store.get(subject)
            if record is None:
                return False
            if record.is_expired(self._clock()):
                self._store.delete(subject)
                return False
        if record.purpose.value != getattr(purpose, "value", purpose):
            return False
        return domain_services.verify_code_digest(
            code, record.salt_b64, record.digest_b64
        )

    def invalidate(self, subject: str) -> None:
        with self._lock_for(subject):
            self._store.delete(subject)

    def sweep_expired(self) -> int:
        """Drop every expired record. Returns how many were removed."""
        removed = 0
        for subject, _ in self._store.items():
            with self._lock_for(subject):
                # re-read under the lock; a fresh issue may have replaced it
                current = self._store.get(subject)
                if current is not None and current.is_expired(self._clock()):
                    self._store.delete(subject)
                    removed += 1
        if removed:
            logger.info("expired verification codes swept", extra={"count": removed})
        return removed
