from __future__ import annotations

import uuid

from app.domain.enums import CodePurpose
from app.domain.ports.outbox_repository import OutboxRepositoryPort

TOPIC_BY_PURPOSE = {
    CodePurpose.VERIFICATION: "user.verification_code",
    CodePurpose.PASSWORD_RESET: "user.password_reset_code",
}

_SUBJECTS = {
    CodePurpose.VERIFICATION: "Verify your account",
    CodePurpose.PASSWORD_RESET: "Reset your password",
}


def render_code_email(
    purpose: CodePurpose, code: str, ttl_minutes: int, name: str = ""
) -> tuple[str, str]:
    greeting = f"Hi {name}," if name else "Hi,"
    if purpose is CodePurpose.VERIFICATION:
        action = "Use this code to verify your account"
    else:
        action = "Use this code to reset your password"
    body = (
        f"{greeting}\n\n{action}: {code}\n\n"
        f"It expires in {ttl_minutes} minutes. "
        "If you did not ask for it, you can ignore this email."
    )
    return _SUBJECTS[purpose], body


async def enqueue_code_email(
    outbox: OutboxRepositoryPort,
    *,
    to: str,
    code: str,
    purpose: CodePurpose,
    ttl_minutes: int,
    name: str = "",
) -> str:
    """
    Queue the email in the caller's transaction. Each message gets its own
    idempotency key, which the dispatcher forwards to the mail relay so a
    retried send is not delivered twice.
    """
    subject, body = render_code_email(purpose, code, ttl_minutes, name)
    topic = TOPIC_BY_PURPOSE[purpose]
    idempotency_key = f"{topic}:{uuid.uuid4()}"
    return await outbox.enqueue(
        topic=topic,
        payload={
            "to": to,
            "subject": subject,
            "body": body,
            "idempotency_key": idempotency_key,
        },
        idempotency_key=idempotency_key,
    )
