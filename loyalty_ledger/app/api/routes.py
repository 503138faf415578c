from typing import Any

from fastapi import APIRouter, Body, Depends

from ..core.dependencies import get_loyalty_points_service
from ..models import AccountType, BalanceResponse, TransactionResponse
from ..services import LoyaltyPointsService


router = APIRouter(prefix="/loyalty-points", tags=["loyalty-points"])

@router.post("/deposit", response_model=TransactionResponse)
def deposit(
    payload: dict[str, Any] = Body(...),
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> TransactionResponse:
    return service.deposit(payload)

@router.post("/withdraw", response_model=TransactionResponse)
def withdraw(
    payload: dict[str, Any] = Body(...),
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> TransactionResponse:
    return service.withdraw(payload)

@router.post("/cancel", response_model=TransactionResponse)
def cancel(
    payload: dict[str, Any] = Body(...),
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> TransactionResponse:
    return service.cancel(payload)

@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> TransactionResponse:
    return service.get_transaction(transaction_id)

account_router = APIRouter(prefix="/accounts", tags=["accounts"])

@account_router.get("/{account_type}/{account_id}/balance", response_model=BalanceResponse)
def get_balance(
    account_type: AccountType,
    account_id: int,
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> BalanceResponse:
    return service.get_balance(account_type, account_id)

@account_router.get(
    "/{account_type}/{account_id}/transactions",
    response_model=list[TransactionResponse],
)
def get_transactions(
    account_type: AccountType,
    account_id: int,
    service: LoyaltyPointsService = Depends(get_loyalty_points_service),
) -> list[TransactionResponse]:
    return service.get_transactions(account_type, account_id)

__all__ = ["router", "account_router"]
