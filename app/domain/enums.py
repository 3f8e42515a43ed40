"""Closed sets of tags shared by the domain and the transport layer."""

import enum


class CodePurpose(str, enum.Enum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password-reset"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    WALLET = "wallet"
    MOBILE_MONEY = "mobile_money"


class UserRole(str, enum.Enum):
    RIDER = "rider"
    DRIVER = "driver"


class RevenuePeriod(str, enum.Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
