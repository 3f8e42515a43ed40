from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.ports.unit_of_work import UnitOfWorkPort
from app.presentation.dependencies import get_current_user_id, get_uow
from app.schemas.responses import UserOut

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserOut)
async def get_me(
    user_id: Annotated[str, Depends(get_current_user_id)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
):
    async with uow as tx:
        user = await tx.db_users.get_by_id(user_id)
        # read only; no commit needed
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="unknown user"
        )
    return UserOut.from_user(user)
