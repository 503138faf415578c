from __future__ import annotations
from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LoyaltyAccount(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: Optional[str] = Field(default=None, index=True)
    card: Optional[str] = Field(default=None, index=True)
    email: Optional[str] = Field(default=None, index=True)
    email_notification: bool = False
    phone_notification: bool = False
    active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)


class LoyaltyPointsTransaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # lookup key only; transactions never cascade from accounts
    account_id: int = Field(foreign_key="loyaltyaccount.id", index=True)
    loyalty_points_rule: Optional[str] = None
    points_amount: Decimal = Field(max_digits=14, decimal_places=2)
    description: str
    payment_id: Optional[str] = None
    payment_amount: Optional[Decimal] = Field(default=None, max_digits=14, decimal_places=2)
    payment_time: Optional[datetime] = None
    # NULL means "not canceled"
    canceled: Optional[datetime] = Field(default=None, index=True)
    cancellation_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow, index=True)


class LoyaltyPointsRule(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    points_rule: str = Field(index=True, unique=True)
    accrual_type: str
    accrual_value: Decimal = Field(max_digits=14, decimal_places=2)
