from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Optional

from sqlmodel import Session

from ..core.errors import (
    AccountInactiveError,
    InsufficientFundsError,
    InvalidAmountError,
    LoyaltyPointsError,
    MissingCancellationReasonError,
    TransactionNotFoundError,
)
from ..core.locks import KeyedLock, ledger_locks
from ..models import (
    BalanceResponse,
    LoyaltyAccountModel,
    LoyaltyPointsTransactionModel,
    TransactionResponse,
)
from .notifications import LogNotifier, NotificationDispatcher
from .repository import AccountStore, TransactionLedger
from .rules import PointsRuleResolver, StoredRuleResolver
from .validation import validate_operation


logger = logging.getLogger(__name__)


class LoyaltyPointsService:
    """Deposit, withdraw and cancel loyalty points against accounts.

    Every operation runs validate -> resolve -> check -> mutate, and nothing
    is written unless all checks pass. Balance-changing writes hold the
    account's lock from the balance read until commit.
    """

    def __init__(
        self,
        session: Session,
        accounts: Optional[AccountStore] = None,
        ledger: Optional[TransactionLedger] = None,
        rules: Optional[PointsRuleResolver] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        locks: Optional[KeyedLock] = None,
    ) -> None:
        self.session = session
        self.accounts = accounts or AccountStore(session)
        self.ledger = ledger or TransactionLedger(session)
        self.rules = rules or StoredRuleResolver(session)
        self.dispatcher = dispatcher or NotificationDispatcher(LogNotifier())
        self.locks = locks if locks is not None else ledger_locks

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------
    @contextmanager
    def _unit_of_work(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except LoyaltyPointsError as exc:
            self.session.rollback()
            logger.info(
                f"loyalty.{operation}.rejected",
                extra={**context, "reason": str(exc)},
            )
            raise
        except Exception:
            self.session.rollback()
            raise

    def _resolve_active_account(self, request: Mapping[str, Any]) -> LoyaltyAccountModel:
        account = self.accounts.find_account(request["account_type"], request["account_id"])
        if not account.active:
            raise AccountInactiveError("Account is not active")
        return account

    def _transaction_to_response(
        self, transaction: LoyaltyPointsTransactionModel
    ) -> TransactionResponse:
        return TransactionResponse.model_validate(transaction)

    def _notify_deposit(
        self, account: LoyaltyAccountModel, transaction: TransactionResponse
    ) -> None:
        try:
            balance = self.accounts.get_balance(account.id)
            channels = self.dispatcher.dispatch(account, transaction, balance)
        except Exception:
            # the deposit is committed; post-processing must not fail the request
            self.session.rollback()
            logger.exception(
                "loyalty.deposit.post_processing_failed",
                extra={"transaction_id": transaction.id},
            )
            return
        if channels:
            logger.info(
                "loyalty.deposit.notified",
                extra={"transaction_id": transaction.id, "channels": channels},
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def deposit(self, payload: Mapping[str, Any]) -> TransactionResponse:
        request = validate_operation("deposit", payload)
        context = {"account_type": request["account_type"], "account_id": request["account_id"]}

        with self._unit_of_work("deposit", **context):
            account = self._resolve_active_account(request)
            points_amount = self.rules.resolve(
                request["loyalty_points_rule"], request["payment_amount"]
            )
            if points_amount < 0:
                raise InvalidAmountError("Wrong loyalty points amount")

            with self.locks.hold(("account", account.id)):
                self.accounts.lock_account(account.id)
                transaction = self.ledger.add_transaction(
                    account_id=account.id,
                    points_amount=points_amount,
                    description=request["description"],
                    loyalty_points_rule=request["loyalty_points_rule"],
                    payment_id=request["payment_id"],
                    payment_amount=request["payment_amount"],
                    payment_time=request["payment_time"],
                )
                self.session.commit()

        response = self._transaction_to_response(transaction)
        logger.info(
            "loyalty.deposit",
            extra={**context, "transaction_id": response.id, "points_amount": str(response.points_amount)},
        )
        self._notify_deposit(account, response)
        return response

    def withdraw(self, payload: Mapping[str, Any]) -> TransactionResponse:
        request = validate_operation("withdraw", payload)
        requested = request["points_amount"]
        context = {"account_type": request["account_type"], "account_id": request["account_id"]}

        with self._unit_of_work("withdraw", **context, points_amount=str(requested)):
            account = self._resolve_active_account(request)
            if requested <= 0:
                raise InvalidAmountError("Wrong loyalty points amount")

            with self.locks.hold(("account", account.id)):
                self.accounts.lock_account(account.id)
                balance = self.accounts.get_balance(account.id)
                if balance < requested:
                    raise InsufficientFundsError("Insufficient funds")

                transaction = self.ledger.add_transaction(
                    account_id=account.id,
                    points_amount=-requested,
                    description=request["description"],
                )
                self.session.commit()

        response = self._transaction_to_response(transaction)
        logger.info(
            "loyalty.withdraw",
            extra={**context, "transaction_id": response.id, "points_amount": str(response.points_amount)},
        )
        return response

    def cancel(self, payload: Mapping[str, Any]) -> TransactionResponse:
        request = validate_operation("cancel", payload)
        transaction_id = request["transaction_id"]
        reason = request["cancellation_reason"]

        with self._unit_of_work("cancel", transaction_id=transaction_id):
            if reason is None or not reason.strip():
                raise MissingCancellationReasonError("Cancellation reason is not specified")

            with self.locks.hold(("transaction", transaction_id)):
                transaction = self.ledger.get_active_transaction(transaction_id, for_update=True)
                if transaction is None:
                    raise TransactionNotFoundError("Transaction is not found")

                self.ledger.mark_canceled(
                    transaction,
                    reason=reason,
                    canceled_at=datetime.now(UTC),
                )
                self.session.commit()

        response = self._transaction_to_response(transaction)
        logger.info(
            "loyalty.cancel",
            extra={"transaction_id": transaction_id, "account_id": response.account_id},
        )
        return response

    def get_transaction(self, transaction_id: int) -> TransactionResponse:
        transaction = self.ledger.get_transaction(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError("Transaction is not found")
        return self._transaction_to_response(transaction)

    def get_transactions(self, account_type: str, account_id: int) -> list[TransactionResponse]:
        account = self.accounts.find_account(account_type, account_id)
        return [
            self._transaction_to_response(transaction)
            for transaction in self.ledger.list_transactions(account.id)
        ]

    def get_balance(self, account_type: str, account_id: int) -> BalanceResponse:
        account = self.accounts.find_account(account_type, account_id)
        return BalanceResponse(
            account_id=account.id,
            account_type=account_type,
            identifier=getattr(account, account_type),
            balance=self.accounts.get_balance(account.id),
        )
