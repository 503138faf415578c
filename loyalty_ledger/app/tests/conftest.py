from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from ..core.db import create_engine_for_url, get_engine, get_session, set_engine
from ..core.dependencies import get_notifier
from ..main import app
from ..models import LoyaltyPointsRuleModel
from ..services import AccountStore, Notification, TransactionLedger
from ..services.rules import ACCRUAL_TYPE_ABSOLUTE_POINTS_AMOUNT, ACCRUAL_TYPE_RELATIVE_RATE


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'test.db'}")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        session.add(
            LoyaltyPointsRuleModel(
                points_rule="promo1",
                accrual_type=ACCRUAL_TYPE_ABSOLUTE_POINTS_AMOUNT,
                accrual_value=Decimal("50.00"),
            )
        )
        session.add(
            LoyaltyPointsRuleModel(
                points_rule="cashback5",
                accrual_type=ACCRUAL_TYPE_RELATIVE_RATE,
                accrual_value=Decimal("5.00"),
            )
        )
        session.commit()
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_account(engine):
    def _make_account(**fields) -> int:
        with Session(engine) as session:
            account = AccountStore(session).add_account(**fields)
            session.commit()
            return account.id

    return _make_account


@pytest.fixture
def add_points(engine):
    """Write a transaction straight into the ledger, bypassing the service."""

    def _add_points(account_id: int, amount: str, description: str = "Seed points") -> int:
        with Session(engine) as session:
            transaction = TransactionLedger(session).add_transaction(
                account_id=account_id,
                points_amount=Decimal(amount),
                description=description,
            )
            session.commit()
            return transaction.id

    return _add_points


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def client(engine, notifier) -> TestClient:
    original_engine = get_engine()
    set_engine(engine)

    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    set_engine(original_engine)
