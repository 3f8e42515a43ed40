import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import (
    DomainError,
    InvalidCredentials,
    InvalidOrExpiredCode,
    InvalidTransition,
    PaymentNotFound,
    ProtectedStateDeletion,
    UserAlreadyExists,
    UserNotFound,
)

logger = logging.getLogger(__name__)

# most specific first; lookup walks this in order
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int, str | None], ...] = (
    (InvalidOrExpiredCode, status.HTTP_400_BAD_REQUEST, "invalid or expired code"),
    (InvalidTransition, status.HTTP_409_CONFLICT, None),
    (ProtectedStateDeletion, status.HTTP_409_CONFLICT, None),
    (PaymentNotFound, status.HTTP_404_NOT_FOUND, None),
    (UserNotFound, status.HTTP_400_BAD_REQUEST, "user not found"),
    (UserAlreadyExists, status.HTTP_409_CONFLICT, "email already registered"),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED, "invalid credentials"),
)


def _response_for(exc: DomainError) -> tuple[int, dict]:
    for error_type, code, detail in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            body: dict = {"detail": detail or str(exc)}
            if isinstance(exc, InvalidTransition):
                body["current"] = exc.current.value
                body["proposed"] = exc.proposed.value
            return code, body
    return status.HTTP_400_BAD_REQUEST, {"detail": str(exc) or "bad request"}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code, body = _response_for(exc)
    logger.info(
        "domain error",
        extra={
            "error": type(exc).__name__,
            "status_code": code,
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
