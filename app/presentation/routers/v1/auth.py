from typing import Annotated, Callable

from fastapi import APIRouter, Depends, status

from app.application.forgot_password import forgot_password
from app.application.login_user import login_user
from app.application.register_user import register_user
from app.application.reset_password import reset_password
from app.application.send_verification_code import send_verification_code
from app.application.verify_account import verify_account
from app.application.verify_reset_code import verify_reset_code
from app.domain.code_vault import CodeVault
from app.domain.ports.session_store import SessionStorePort
from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.presentation.dependencies import (
    get_bearer_token,
    get_code_ttl_minutes,
    get_code_vault,
    get_hash_password,
    get_needs_rehash,
    get_sessions,
    get_uow,
    get_verify_password,
)
from app.schemas.requests import (
    EmailIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyCodeIn,
)
from app.schemas.responses import AcceptedOut, OkOut, TokenOut, UserOut

router = APIRouter(prefix="/auth", tags=["Auth"])

UoW = Annotated[UnitOfWorkPort, Depends(get_uow)]
Vault = Annotated[CodeVault, Depends(get_code_vault)]
TtlMinutes = Annotated[int, Depends(get_code_ttl_minutes)]


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=UserOut
)
async def post_register(
    body: RegisterIn,
    uow: UoW,
    code_vault: Vault,
    code_ttl_minutes: TtlMinutes,
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    user = await register_user(
        uow=uow,
        code_vault=code_vault,
        email=body.email,
        password=body.password,
        hash_password=hash_password,
        full_name=body.name,
        phone_number=body.phone_number,
        role=body.role,
        code_ttl_minutes=code_ttl_minutes,
    )
    return UserOut.from_user(user)


@router.post(
    "/send-verification",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=AcceptedOut,
)
async def post_send_verification(
    body: EmailIn, uow: UoW, code_vault: Vault, code_ttl_minutes: TtlMinutes
):
    await send_verification_code(
        uow=uow,
        code_vault=code_vault,
        email=body.email,
        code_ttl_minutes=code_ttl_minutes,
    )
    return AcceptedOut(message="verification code sent to your email")


@router.post("/verify", response_model=OkOut)
async def post_verify_account(body: VerifyCodeIn, uow: UoW, code_vault: Vault):
    await verify_account(
        uow=uow, code_vault=code_vault, email=body.email, code=body.otp
    )
    return OkOut(message="account verified")


@router.post(
    "/forgot-password",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=AcceptedOut,
)
async def post_forgot_password(
    body: EmailIn, uow: UoW, code_vault: Vault, code_ttl_minutes: TtlMinutes
):
    await forgot_password(
        uow=uow,
        code_vault=code_vault,
        email=body.email,
        code_ttl_minutes=code_ttl_minutes,
    )
    return AcceptedOut(message="password reset code sent to your email")


@router.post("/verify-reset-code", response_model=OkOut)
async def post_verify_reset_code(body: VerifyCodeIn, code_vault: Vault):
    verify_reset_code(code_vault, body.email, body.otp)
    return OkOut(message="reset code verified")


@router.post("/reset-password", response_model=OkOut)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: UoW,
    code_vault: Vault,
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    await reset_password(
        uow=uow,
        code_vault=code_vault,
        email=body.email,
        code=body.otp,
        new_password=body.new_password,
        hash_password=hash_password,
    )
    return OkOut(message="password reset")


@router.post("/login", response_model=TokenOut)
async def post_login(
    body: LoginIn,
    uow: UoW,
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
    verify_password: Annotated[
        Callable[[str, str], bool], Depends(get_verify_password)
    ],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    needs_rehash: Annotated[Callable[[str], bool], Depends(get_needs_rehash)],
):
    token = await login_user(
        uow=uow,
        sessions=sessions,
        email=body.email,
        password=body.password,
        verify_password=verify_password,
        hash_password=hash_password,
        needs_rehash=needs_rehash,
    )
    return TokenOut(token=token)


@router.post("/logout", response_model=OkOut)
async def post_logout(
    token: Annotated[str, Depends(get_bearer_token)],
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
):
    await sessions.revoke(token)
    return OkOut(message="logged out")
