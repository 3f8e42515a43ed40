from app.application.code_delivery import enqueue_code_email
from app.domain.code_vault import CodeVault
from app.domain.enums import CodePurpose
from app.domain.errors import UserNotFound
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import normalize_email


async def send_verification_code(
    uow: UnitOfWorkPort,
    code_vault: CodeVault,
    email: str,
    code_ttl_minutes: int = 10,
) -> None:
    """Re-issue an account verification code; the previous one stops working."""
    normalized_email = normalize_email(email)

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if not user:
            raise UserNotFound()
        with code_vault.issuing(normalized_email, CodePurpose.VERIFICATION) as code:
            await enqueue_code_email(
                transaction.outbox,
                to=normalized_email,
                code=code,
                purpose=CodePurpose.VERIFICATION,
                ttl_minutes=code_ttl_minutes,
                name=user.full_name,
            )
            await transaction.commit()
