from typing import Callable

from app.application.code_delivery import enqueue_code_email
from app.domain.code_vault import CodeVault
from app.domain.entities import User
from app.domain.enums import CodePurpose, UserRole
from app.domain.errors import UserAlreadyExists
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.domain.services import normalize_email


async def register_user(
    uow: UnitOfWorkPort,
    code_vault: CodeVault,
    email: str,
    password: str,
    hash_password: Callable[..., str],
    full_name: str = "",
    phone_number: str = "",
    role: UserRole = UserRole.RIDER,
    code_ttl_minutes: int = 10,
) -> User:
    normalized_email = normalize_email(email)
    hashed_password = hash_password(password)

    async with uow as transaction:
        if await transaction.db_users.get_by_email(normalized_email):
            raise UserAlreadyExists()
        user = await transaction.db_users.create(
            User(
                email=normalized_email,
                full_name=full_name,
                phone_number=phone_number,
                role=role,
            ),
            hashed_password,
        )
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
    return user
