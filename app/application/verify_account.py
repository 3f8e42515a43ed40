from app.domain.code_vault import CodeVault
from app.domain.enums import CodePurpose
from app.domain.errors import InvalidOrExpiredCode, UserNotFound
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import normalize_email


async def verify_account(
    uow: UnitOfWorkPort,
    code_vault: CodeVault,
    email: str,
    code: str,
) -> None:
    normalized_email = normalize_email(email)

    if not code_vault.verify(normalized_email, code, CodePurpose.VERIFICATION):
        raise InvalidOrExpiredCode()

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if not user:
            raise UserNotFound()
        user.mark_verified()
        await transaction.db_users.set_email_verified(user.id)
        await transaction.commit()

    code_vault.invalidate(normalized_email)
