from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import func
from sqlmodel import Session, select

from ..core.errors import AccountNotFoundError, ValidationError
from ..models import LoyaltyAccountModel, LoyaltyPointsTransactionModel

CENT = Decimal("0.01")
IDENTIFIER_TYPES = ("phone", "card", "email")


class AccountStore:
    """Account lookups and balance computation over the SQLModel session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_account(
        self,
        *,
        phone: Optional[str] = None,
        card: Optional[str] = None,
        email: Optional[str] = None,
        active: bool = True,
        email_notification: bool = False,
        phone_notification: bool = False,
    ) -> LoyaltyAccountModel:
        account = LoyaltyAccountModel(
            phone=phone,
            card=card,
            email=email,
            active=active,
            email_notification=email_notification,
            phone_notification=phone_notification,
        )
        self.session.add(account)
        self.session.flush()
        self.session.refresh(account)
        return account

    def get_account(self, account_id: int) -> Optional[LoyaltyAccountModel]:
        return self.session.get(LoyaltyAccountModel, account_id)

    def find_account(
        self, identifier_type: str, identifier_value: Union[int, str]
    ) -> LoyaltyAccountModel:
        if identifier_type not in IDENTIFIER_TYPES:
            raise ValidationError("Wrong account parameters")
        column = getattr(LoyaltyAccountModel, identifier_type)
        stmt = select(LoyaltyAccountModel).where(column == str(identifier_value))
        account = self.session.exec(stmt).first()
        if account is None:
            raise AccountNotFoundError("Account is not found")
        return account

    def lock_account(self, account_id: int) -> LoyaltyAccountModel:
        # FOR UPDATE is a no-op on SQLite; the in-process KeyedLock covers it there
        stmt = (
            select(LoyaltyAccountModel)
            .where(LoyaltyAccountModel.id == account_id)
            .with_for_update()
        )
        return self.session.exec(stmt).one()

    def get_balance(self, account_id: int) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(LoyaltyPointsTransactionModel.points_amount), 0))
            .where(LoyaltyPointsTransactionModel.account_id == account_id)
            .where(LoyaltyPointsTransactionModel.canceled.is_(None))
        )
        total = self.session.exec(stmt).one()
        return Decimal(str(total)).quantize(CENT)


class TransactionLedger:
    """Append-only transaction storage; only cancellation fields ever change."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_transaction(
        self,
        *,
        account_id: int,
        points_amount: Decimal,
        description: str,
        loyalty_points_rule: Optional[str] = None,
        payment_id: Optional[str] = None,
        payment_amount: Optional[Decimal] = None,
        payment_time: Optional[datetime] = None,
    ) -> LoyaltyPointsTransactionModel:
        transaction = LoyaltyPointsTransactionModel(
            account_id=account_id,
            points_amount=points_amount,
            description=description,
            loyalty_points_rule=loyalty_points_rule,
            payment_id=payment_id,
            payment_amount=payment_amount,
            payment_time=payment_time,
        )
        self.session.add(transaction)
        self.session.flush()
        self.session.refresh(transaction)
        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[LoyaltyPointsTransactionModel]:
        return self.session.get(LoyaltyPointsTransactionModel, transaction_id)

    def get_active_transaction(
        self, transaction_id: int, *, for_update: bool = False
    ) -> Optional[LoyaltyPointsTransactionModel]:
        stmt = (
            select(LoyaltyPointsTransactionModel)
            .where(LoyaltyPointsTransactionModel.id == transaction_id)
            .where(LoyaltyPointsTransactionModel.canceled.is_(None))
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.exec(stmt).first()

    def mark_canceled(
        self,
        transaction: LoyaltyPointsTransactionModel,
        *,
        reason: str,
        canceled_at: datetime,
    ) -> LoyaltyPointsTransactionModel:
        transaction.canceled = canceled_at
        transaction.cancellation_reason = reason
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def list_transactions(self, account_id: int) -> list[LoyaltyPointsTransactionModel]:
        stmt = (
            select(LoyaltyPointsTransactionModel)
            .where(LoyaltyPointsTransactionModel.account_id == account_id)
            .order_by(LoyaltyPointsTransactionModel.id)
        )
        return list(self.session.exec(stmt))
