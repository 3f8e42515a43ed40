import uuid
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from app.domain.enums import PaymentMethod, PaymentStatus, UserRole

CODE_PATTERN = r"^\d{4,10}$"


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    phone_number: str = Field(..., min_length=10, max_length=15)
    password: str = Field(..., description="The password of the user", min_length=6)
    role: UserRole = UserRole.RIDER


class EmailIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class VerifyCodeIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    otp: str = Field(..., pattern=CODE_PATTERN, description="numeric one-time code")


class ResetPasswordIn(VerifyCodeIn):
    new_password: str = Field(..., min_length=6)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PaymentCreateIn(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    method: PaymentMethod = PaymentMethod.CASH
    ride_id: str = Field(..., min_length=1)
    user_id: uuid.UUID
    transaction_id: str | None = Field(None, max_length=255)
    description: str | None = None


class PaymentUpdateIn(BaseModel):
    status: PaymentStatus | None = None
    transaction_id: str | None = Field(None, max_length=255)
    description: str | None = None
