class LoyaltyPointsError(Exception):
    """Base class for every rejection surfaced to callers."""


class ValidationError(LoyaltyPointsError):
    """Raised when request input is malformed, missing or out of range."""


class UnknownOperationError(ValidationError):
    """Raised when no validation rules are registered for an operation."""


class AccountNotFoundError(LoyaltyPointsError):
    """Raised when no account matches the given identifier."""


class AccountInactiveError(LoyaltyPointsError):
    """Raised when an operation targets a deactivated account."""


class InvalidAmountError(LoyaltyPointsError):
    """Raised when a withdrawal asks for a non-positive points amount."""


class InsufficientFundsError(LoyaltyPointsError):
    """Raised when a withdrawal would drop the balance below zero."""


class TransactionNotFoundError(LoyaltyPointsError):
    """Raised when a transaction id is missing or already canceled."""


class MissingCancellationReasonError(LoyaltyPointsError):
    """Raised when a cancel request carries no reason."""


class PointsRuleNotFoundError(LoyaltyPointsError):
    """Raised when a deposit names a loyalty points rule nobody knows."""


class NotificationFailure(LoyaltyPointsError):
    """Raised by notifiers when delivery fails. Never reaches the caller."""
