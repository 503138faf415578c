from .db import LoyaltyAccount as LoyaltyAccountModel
from .db import LoyaltyPointsRule as LoyaltyPointsRuleModel
from .db import LoyaltyPointsTransaction as LoyaltyPointsTransactionModel
from .schemas import (
    AccountType,
    BalanceResponse,
    CancelRequest,
    DepositRequest,
    TransactionResponse,
    WithdrawRequest,
)

__all__ = [
    "AccountType",
    "BalanceResponse",
    "CancelRequest",
    "DepositRequest",
    "TransactionResponse",
    "WithdrawRequest",
    "LoyaltyAccountModel",
    "LoyaltyPointsRuleModel",
    "LoyaltyPointsTransactionModel",
]
