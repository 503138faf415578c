from .loyalty_points import LoyaltyPointsService
from .notifications import LogNotifier, Notification, NotificationDispatcher, Notifier
from .repository import AccountStore, TransactionLedger
from .rules import PointsRuleResolver, StoredRuleResolver
from .validation import validate_operation

__all__ = [
    "AccountStore",
    "LogNotifier",
    "LoyaltyPointsService",
    "Notification",
    "NotificationDispatcher",
    "Notifier",
    "PointsRuleResolver",
    "StoredRuleResolver",
    "TransactionLedger",
    "validate_operation",
]
