from __future__ import annotations

import logging
from typing import Optional

import httpx

from app.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """The relay could not be reached or refused the message."""


class HttpSmtpEmailAdapter(EmailPort):
    """
    Posts code emails as JSON to an HTTP mail relay at ``{base_url}{send_path}``.

    The outbox idempotency key travels as the ``Idempotency-Key`` header so a
    relay can drop the duplicate produced by a retry after a lost response.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
        sender: str | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/" + send_path.lstrip("/")
        self._sender = sender
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _message(self, to: str, subject: str, body: str) -> dict[str, str]:
        message = {"to": to, "subject": subject, "body": body}
        if self._sender:
            message["from"] = self._sender
        return message

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        try:
            resp = await self._client.post(
                self._url, json=self._message(to, subject, body), headers=headers
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"SMTP HTTP error: {e}") from e

        if not resp.is_success:
            raise EmailDeliveryError(
                f"SMTP responded {resp.status_code}: {resp.text[:200]}"
            )
        logger.info(
            "email handed to relay",
            extra={"subject": subject, "status_code": resp.status_code},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
