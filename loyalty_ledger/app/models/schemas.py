from datetime import UTC, datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AccountType = Literal["phone", "card", "email"]
# matches the Numeric(14, 2) columns
PointsDecimal = Annotated[Decimal, Field(max_digits=14, decimal_places=2)]


class _OperationRequest(BaseModel):
    # keys outside the rule set are dropped, not rejected
    model_config = ConfigDict(extra="ignore")


class DepositRequest(_OperationRequest):
    account_type: AccountType
    account_id: int = Field(..., gt=0, description="Value of the account identifier")
    loyalty_points_rule: str = Field(..., min_length=3)
    description: str = Field(..., min_length=3)
    # present-but-nullable: the key is required, null is accepted
    payment_id: Optional[str]
    payment_amount: Optional[PointsDecimal]
    payment_time: Optional[datetime]

    @field_validator("payment_time")
    @classmethod
    def _payment_time_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # naive times and bare dates are taken as UTC
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class WithdrawRequest(_OperationRequest):
    account_type: AccountType
    account_id: int = Field(..., gt=0)
    points_amount: PointsDecimal = Field(..., description="Points to redeem")
    description: str = Field(..., min_length=3)


class CancelRequest(_OperationRequest):
    transaction_id: int = Field(..., gt=0)
    cancellation_reason: Optional[str]


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    loyalty_points_rule: Optional[str] = None
    points_amount: Decimal
    description: str
    payment_id: Optional[str] = None
    payment_amount: Optional[Decimal] = None
    payment_time: Optional[datetime] = None
    canceled: Optional[datetime] = Field(default=None, description="Cancellation time, null while active")
    cancellation_reason: Optional[str] = None
    created_at: datetime


class BalanceResponse(BaseModel):
    account_id: int
    account_type: AccountType
    identifier: str
    balance: Decimal
