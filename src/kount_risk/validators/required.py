"""Required-field validation for inbound orders."""

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.base_models import OrderInput
from ..core.exceptions import OrderValidationError
from .base import OrderCheck
from .currency import CurrencyValidator
from .nulls import is_blank

logger = logging.getLogger(__name__)

# Checked in this order; the first failure is the one reported
REQUIRED_FIELDS = (
    "order_id",
    "session_id",
    "total_amount",
    "currency",
    "created_at",
    "channel",
    "payment",
    "customer",
)

_currency_validator = CurrencyValidator()


def check_order(raw: Mapping[str, Any]) -> OrderCheck:
    """
    Check an order payload without raising.

    Every required field is checked independently, then the shape of the
    ones that are present.
    """
    check = OrderCheck()

    for field in REQUIRED_FIELDS:
        if is_blank(raw.get(field)):
            check.missing(field)

    amount = raw.get("total_amount")
    if not is_blank(amount) and not _is_non_negative_number(amount):
        check.invalid("total_amount", "INVALID_AMOUNT", f"total_amount must be a non-negative number, got {amount!r}")

    currency = raw.get("currency")
    if not is_blank(currency):
        currency_valid, _, currency_error = _currency_validator.validate(currency)
        if not currency_valid:
            check.invalid("currency", "INVALID_CURRENCY", currency_error or "Invalid currency")

    for field in ("payment", "customer"):
        value = raw.get(field)
        if not is_blank(value) and not isinstance(value, Mapping):
            check.invalid(field, "INVALID_TYPE", f"{field} must be an object")

    return check


def validate_order(order: Mapping[str, Any] | OrderInput) -> OrderInput:
    """
    Validate an order and parse it into an OrderInput.

    Raises:
        OrderValidationError: naming the first field that failed
    """
    raw = order.model_dump() if isinstance(order, OrderInput) else order
    if not isinstance(raw, Mapping):
        raise OrderValidationError(f"Order must be an object, got {type(raw).__name__}", field=None)

    check = check_order(raw)
    if not check.ok:
        logger.debug("[Kount] Order %s failed validation: %s", raw.get("order_id"), check.codes)
        raise check.to_exception()

    if isinstance(order, OrderInput):
        return order

    payload = dict(raw)
    payload["currency"] = _currency_validator.normalize(payload["currency"])
    try:
        return OrderInput.model_validate(payload)
    except PydanticValidationError as e:
        type_check = OrderCheck()
        for err in e.errors():
            type_check.invalid(".".join(str(part) for part in err["loc"]), err["type"].upper(), err["msg"])
        first = type_check.first
        raise type_check.to_exception(f"{first.field}: {first.message}") from e


def _is_non_negative_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return False
    return number.is_finite() and number >= 0
