from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from ..core.errors import UnknownOperationError, ValidationError
from ..services.validation import get_rules, validate_operation


def deposit_payload(**overrides):
    payload = {
        "account_type": "email",
        "account_id": 7,
        "loyalty_points_rule": "promo1",
        "description": "Welcome bonus",
        "payment_id": None,
        "payment_amount": None,
        "payment_time": None,
    }
    payload.update(overrides)
    return payload


def test_deposit_accepts_null_present_fields() -> None:
    validated = validate_operation("deposit", deposit_payload())
    assert validated["account_type"] == "email"
    assert validated["account_id"] == 7
    assert validated["payment_id"] is None
    assert validated["payment_amount"] is None
    assert validated["payment_time"] is None


def test_deposit_normalizes_payment_fields() -> None:
    validated = validate_operation(
        "deposit",
        deposit_payload(
            account_id="12",
            payment_id="pay-1",
            payment_amount="99.90",
            payment_time="2024-03-01T10:30:00",
        ),
    )
    assert validated["account_id"] == 12
    assert validated["payment_amount"] == Decimal("99.90")
    assert validated["payment_time"] == datetime(2024, 3, 1, 10, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2024-05-01", datetime(2024, 5, 1, tzinfo=UTC)),
        ("2024-05-01T12:00:00", datetime(2024, 5, 1, 12, tzinfo=UTC)),
        ("2024-05-01T14:00:00+02:00", datetime(2024, 5, 1, 12, tzinfo=UTC)),
    ],
)
def test_deposit_payment_time_is_normalized_to_utc(raw: str, expected: datetime) -> None:
    validated = validate_operation("deposit", deposit_payload(payment_time=raw))
    assert validated["payment_time"] == expected
    assert validated["payment_time"].utcoffset() == timedelta(0)


@pytest.mark.parametrize("missing", ["payment_id", "payment_amount", "payment_time"])
def test_deposit_rejects_absent_present_field(missing: str) -> None:
    payload = deposit_payload()
    del payload[missing]
    with pytest.raises(ValidationError) as excinfo:
        validate_operation("deposit", payload)
    assert missing in str(excinfo.value)
    assert str(excinfo.value).startswith("Wrong account parameters")


@pytest.mark.parametrize(
    "overrides",
    [
        {"account_type": "passport"},
        {"account_id": 0},
        {"account_id": -3},
        {"loyalty_points_rule": "ab"},
        {"description": "hi"},
        {"payment_amount": "10.123"},
        {"payment_amount": "123456789012345678.99"},
    ],
)
def test_deposit_rejects_out_of_range_values(overrides) -> None:
    with pytest.raises(ValidationError):
        validate_operation("deposit", deposit_payload(**overrides))


def test_unknown_keys_are_dropped() -> None:
    validated = validate_operation(
        "cancel",
        {"transaction_id": 3, "cancellation_reason": "dispute", "points_amount": 10},
    )
    assert validated == {"transaction_id": 3, "cancellation_reason": "dispute"}


def test_cancel_requires_reason_key_but_allows_null() -> None:
    assert validate_operation("cancel", {"transaction_id": 3, "cancellation_reason": None}) == {
        "transaction_id": 3,
        "cancellation_reason": None,
    }
    with pytest.raises(ValidationError) as excinfo:
        validate_operation("cancel", {"transaction_id": 3})
    assert str(excinfo.value).startswith("check request parameters")


def test_withdraw_keeps_sign_checks_for_the_processor() -> None:
    validated = validate_operation(
        "withdraw",
        {"account_type": "phone", "account_id": 7, "points_amount": -5, "description": "Redeem"},
    )
    assert validated["points_amount"] == Decimal("-5")


def test_withdraw_requires_points_amount() -> None:
    with pytest.raises(ValidationError):
        validate_operation(
            "withdraw",
            {"account_type": "phone", "account_id": 7, "description": "Redeem"},
        )


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_operation("withdraw", ["account_type", "phone"])


def test_unknown_operation_is_a_configuration_error() -> None:
    assert get_rules("transfer") is None
    with pytest.raises(UnknownOperationError) as excinfo:
        validate_operation("transfer", {})
    assert str(excinfo.value) == "no validation rules found"
    assert isinstance(excinfo.value, ValidationError)


def test_withdraw_amount_must_fit_the_ledger_column() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_operation(
            "withdraw",
            {
                "account_type": "phone",
                "account_id": 7,
                "points_amount": "1234567890123.45",
                "description": "Redeem",
            },
        )
    assert "points_amount" in str(excinfo.value)
    validated = validate_operation(
        "withdraw",
        {"account_type": "phone", "account_id": 7, "points_amount": "999999999999.99", "description": "Redeem"},
    )
    assert validated["points_amount"] == Decimal("999999999999.99")
