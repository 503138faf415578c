"""Per-operation input validation.

Each operation maps to a pydantic request model. A model's required fields
must be present; ``Optional`` fields without a default must be present as keys
but may be null. The mapping is read-only and resolved on every call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import UnknownOperationError, ValidationError
from ..models import CancelRequest, DepositRequest, WithdrawRequest


logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "check request parameters"

_RULES: Mapping[str, type[BaseModel]] = MappingProxyType(
    {
        "deposit": DepositRequest,
        "withdraw": WithdrawRequest,
        "cancel": CancelRequest,
    }
)

_ERROR_MESSAGES: Mapping[str, str] = MappingProxyType(
    {
        "deposit": "Wrong account parameters",
        "withdraw": "Wrong account parameters",
    }
)


def get_rules(operation: str) -> Optional[type[BaseModel]]:
    return _RULES.get(operation)


def _describe(exc: PydanticValidationError) -> str:
    reasons = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        reasons.append(f"{field}: {error['msg']}")
    return "; ".join(reasons)


def validate_operation(operation: str, payload: Any) -> dict[str, Any]:
    """Return the typed, recognised fields of ``payload`` for ``operation``.

    Raises ``UnknownOperationError`` when the operation has no rule set and
    ``ValidationError`` when the payload does not satisfy it.
    """
    rules = get_rules(operation)
    if rules is None:
        logger.error("validation.rules_missing", extra={"operation": operation})
        raise UnknownOperationError("no validation rules found")

    prefix = _ERROR_MESSAGES.get(operation, DEFAULT_ERROR_MESSAGE)
    if not isinstance(payload, Mapping):
        logger.info("validation.failed", extra={"operation": operation, "reason": "not a mapping"})
        raise ValidationError(prefix)

    try:
        request = rules.model_validate(dict(payload))
    except PydanticValidationError as exc:
        reason = _describe(exc)
        logger.info("validation.failed", extra={"operation": operation, "reason": reason})
        raise ValidationError(f"{prefix}: {reason}") from exc

    return request.model_dump()
