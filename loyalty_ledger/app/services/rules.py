from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol

from sqlmodel import Session, select

from ..core.errors import PointsRuleNotFoundError
from ..models import LoyaltyPointsRuleModel
from .repository import CENT

ACCRUAL_TYPE_RELATIVE_RATE = "relative_rate"
ACCRUAL_TYPE_ABSOLUTE_POINTS_AMOUNT = "absolute_points_amount"


class PointsRuleResolver(Protocol):
    def resolve(self, points_rule: str, payment_amount: Optional[Decimal]) -> Decimal:
        ...


class StoredRuleResolver:
    """Resolves rule identifiers against the ``LoyaltyPointsRule`` table.

    ``relative_rate`` awards ``accrual_value`` percent of the payment amount;
    ``absolute_points_amount`` awards ``accrual_value`` regardless of payment.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve(self, points_rule: str, payment_amount: Optional[Decimal]) -> Decimal:
        stmt = select(LoyaltyPointsRuleModel).where(
            LoyaltyPointsRuleModel.points_rule == points_rule
        )
        rule = self.session.exec(stmt).first()
        if rule is None:
            raise PointsRuleNotFoundError("Loyalty points rule is not found")

        if rule.accrual_type == ACCRUAL_TYPE_RELATIVE_RATE:
            if payment_amount is None:
                return Decimal("0.00")
            points = payment_amount * Decimal(rule.accrual_value) / Decimal(100)
            return points.quantize(CENT, rounding=ROUND_HALF_UP)
        if rule.accrual_type == ACCRUAL_TYPE_ABSOLUTE_POINTS_AMOUNT:
            return Decimal(rule.accrual_value).quantize(CENT, rounding=ROUND_HALF_UP)

        raise PointsRuleNotFoundError(
            f"Loyalty points rule {points_rule} has unknown accrual type {rule.accrual_type}"
        )
