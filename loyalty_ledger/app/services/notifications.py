from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Protocol

from ..models import LoyaltyAccountModel


logger = logging.getLogger(__name__)

EMAIL = "email"
SMS = "sms"


@dataclass(frozen=True)
class Notification:
    """Plain-value snapshot; safe to deliver after the request session closes."""

    channel: str
    recipient: str
    account_id: int
    transaction_id: int
    points_amount: Decimal
    balance: Decimal

    @property
    def text(self) -> str:
        return f"You received {self.points_amount} Your balance {self.balance}"


class Notifier(Protocol):
    def send(self, notification: Notification) -> None:
        ...


class LogNotifier:
    """Stand-in for real mail/SMS gateways: records what would be sent."""

    def send(self, notification: Notification) -> None:
        logger.info(
            f"notification.{notification.channel}",
            extra={
                "recipient": notification.recipient,
                "account_id": notification.account_id,
                "transaction_id": notification.transaction_id,
                "points_amount": str(notification.points_amount),
                "balance": str(notification.balance),
                "text": notification.text,
            },
        )


class NotificationDispatcher:
    def __init__(
        self,
        notifier: Notifier,
        schedule: Optional[Callable[..., Any]] = None,
        enabled: bool = True,
    ) -> None:
        self.notifier = notifier
        # e.g. BackgroundTasks.add_task; None delivers inline
        self.schedule = schedule
        self.enabled = enabled

    def channels_for(self, account: LoyaltyAccountModel) -> list[tuple[str, str]]:
        channels = []
        if account.email and account.email_notification:
            channels.append((EMAIL, account.email))
        if account.phone and account.phone_notification:
            channels.append((SMS, account.phone))
        return channels

    def dispatch(self, account: LoyaltyAccountModel, transaction: Any, balance: Decimal) -> list[str]:
        """Queue one notification per enabled channel and return the channel names."""
        if not self.enabled:
            return []

        scheduled = []
        for channel, recipient in self.channels_for(account):
            notification = Notification(
                channel=channel,
                recipient=recipient,
                account_id=account.id,
                transaction_id=transaction.id,
                points_amount=transaction.points_amount,
                balance=balance,
            )
            if self.schedule is None:
                self.deliver(notification)
            else:
                self.schedule(self.deliver, notification)
            scheduled.append(channel)
        return scheduled

    def deliver(self, notification: Notification) -> None:
        try:
            self.notifier.send(notification)
        except Exception:
            # delivery problems never reach the caller; the transaction is already committed
            logger.warning(
                "notification.failed",
                extra={
                    "channel": notification.channel,
                    "transaction_id": notification.transaction_id,
                },
                exc_info=True,
            )
