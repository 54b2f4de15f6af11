"""Unit tests for order validators."""

from datetime import datetime, timedelta, timezone

import pytest

from kount_risk.core.base_models import OrderInput
from kount_risk.core.exceptions import OrderValidationError
from kount_risk.validators import (
    REQUIRED_FIELDS,
    CurrencyValidator,
    OrderCheck,
    check_order,
    compact,
    format_order_time,
    is_blank,
    normalize_null,
    parse_timestamp,
    validate_order,
)

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestNullNormalization:
    """Tests for null normalization utilities."""

    @pytest.mark.parametrize("input_value", [None, "", "   ", "null", "NULL", "None", "none"])
    def test_normalize_null_converts_null_representations(self, input_value):
        assert normalize_null(input_value) is None

    @pytest.mark.parametrize("input_value", ["hello", "0", "false", 0, False, [], {}])
    def test_normalize_null_preserves_non_null_values(self, input_value):
        assert normalize_null(input_value) == input_value

    @pytest.mark.parametrize("input_value", [None, "", " ", {}, [], ()])
    def test_is_blank(self, input_value):
        assert is_blank(input_value)

    @pytest.mark.parametrize("input_value", [0, 0.0, False, "x", "null", "None", {"a": 1}, [0]])
    def test_is_not_blank(self, input_value):
        assert not is_blank(input_value)


class TestCompact:
    """Tests for recursive sparse encoding."""

    def test_drops_blank_values_at_every_depth(self):
        payload = {
            "a": None,
            "b": "",
            "c": {"d": None, "e": {"f": None}},
            "g": [{"h": None}, {"i": 1}],
            "j": 0,
            "k": False,
        }

        assert compact(payload) == {"g": [{"i": 1}], "j": 0, "k": False}

    def test_empty_result_for_all_blank_dict(self):
        assert compact({"a": {"b": {"c": None}}}) == {}

    def test_keeps_null_like_words(self):
        assert compact({"family": "Null", "coupon": "none", "note": "  "}) == {"family": "Null", "coupon": "none"}


class TestCurrencyValidator:
    """Tests for CurrencyValidator."""

    def test_normalizes_to_uppercase(self):
        assert CurrencyValidator().validate(" usd ") == (True, "USD", None)

    @pytest.mark.parametrize("currency", ["US", "USDX", "12$", ""])
    def test_rejects_malformed_codes(self, currency):
        is_valid, normalized, error = CurrencyValidator().validate(currency)
        assert not is_valid
        assert normalized is None
        assert error

    def test_rejects_non_string(self):
        assert not CurrencyValidator().is_valid(840)


class TestTimestamps:
    """Tests for timestamp parsing and clamping."""

    def test_parse_iso_with_zulu(self):
        assert parse_timestamp("2026-01-15T11:30:00Z") == datetime(2026, 1, 15, 11, 30, tzinfo=timezone.utc)

    def test_parse_offset_converted_to_utc(self):
        assert parse_timestamp("2026-01-15T06:30:00-05:00") == datetime(2026, 1, 15, 11, 30, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        assert parse_timestamp(datetime(2026, 1, 1, 9, 0)) == datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def test_epoch_seconds(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, {"at": 1}])
    def test_unparseable_values_return_none(self, value):
        assert parse_timestamp(value) is None

    def test_past_time_formatted(self):
        assert format_order_time("2026-01-15T11:30:00.123456Z", NOW) == "2026-01-15T11:30:00Z"

    def test_future_time_clamped_to_now(self):
        future = NOW + timedelta(days=2)
        assert format_order_time(future, NOW) == "2026-01-15T12:00:00Z"

    @pytest.mark.parametrize("value", [None, "garbage"])
    def test_missing_or_garbage_uses_now(self, value):
        assert format_order_time(value, NOW) == "2026-01-15T12:00:00Z"


class TestOrderCheck:
    """Tests for OrderCheck."""

    def test_issues_mark_check_failed(self):
        check = OrderCheck()
        assert check.ok
        assert check.first is None

        check.missing("order_id")
        check.invalid("currency", "INVALID_CURRENCY", "Currency must be a 3-letter code")

        assert not check.ok
        assert check.codes == ["MISSING_FIELD", "INVALID_CURRENCY"]
        assert check.first.field == "order_id"

    def test_to_exception_carries_every_issue(self):
        check = OrderCheck()
        check.missing("session_id")
        check.missing("customer")

        error = check.to_exception()

        assert isinstance(error, OrderValidationError)
        assert error.message == "session_id is required"
        assert error.field == "session_id"
        assert error.errors == [
            {"field": "session_id", "code": "MISSING_FIELD", "message": "session_id is required"},
            {"field": "customer", "code": "MISSING_FIELD", "message": "customer is required"},
        ]


class TestValidateOrder:
    """Tests for required-field validation."""

    def test_minimal_order_is_valid(self, minimal_order):
        order = validate_order(minimal_order)

        assert isinstance(order, OrderInput)
        assert order.order_id == "O1"
        assert order.customer.ip_address == "1.2.3.4"

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_missing_required_field_named(self, minimal_order, field):
        """Test that each missing required field is reported by name."""
        del minimal_order[field]

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == field
        assert field in exc_info.value.message

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_blank_required_field_named(self, minimal_order, field):
        minimal_order[field] = {} if field in ("payment", "customer") else ""

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == field

    def test_first_missing_field_reported_deterministically(self, minimal_order):
        """Test that with several fields missing the first in order wins."""
        del minimal_order["customer"]
        del minimal_order["currency"]
        del minimal_order["session_id"]

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == "session_id"
        assert [e["field"] for e in exc_info.value.errors] == ["session_id", "currency", "customer"]

    def test_zero_amount_is_present(self, minimal_order):
        minimal_order["total_amount"] = 0
        assert validate_order(minimal_order).total_amount == 0

    @pytest.mark.parametrize("amount", ["ten", -1, True])
    def test_invalid_amount(self, minimal_order, amount):
        minimal_order["total_amount"] = amount

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == "total_amount"

    def test_numeric_string_amount_accepted(self, minimal_order):
        minimal_order["total_amount"] = "10.50"
        assert validate_order(minimal_order).total_amount == 10.5

    def test_invalid_currency(self, minimal_order):
        minimal_order["currency"] = "DOLLARS"

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == "currency"

    def test_currency_uppercased(self, minimal_order):
        minimal_order["currency"] = "usd"
        assert validate_order(minimal_order).currency == "USD"

    def test_customer_must_be_object(self, minimal_order):
        minimal_order["customer"] = "1.2.3.4"

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == "customer"
        assert exc_info.value.errors[0]["code"] == "INVALID_TYPE"

    def test_nested_type_error_becomes_validation_error(self, minimal_order):
        """Test that pydantic errors surface as OrderValidationError."""
        minimal_order["items"] = [{"name": "Tea", "quantity": "lots"}]

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(minimal_order)

        assert exc_info.value.field == "items.0.quantity"

    def test_non_mapping_rejected(self):
        with pytest.raises(OrderValidationError):
            validate_order(["not", "an", "order"])

    def test_order_input_passes_through(self, minimal_order):
        order = OrderInput.model_validate(minimal_order)
        assert validate_order(order) is order

    def test_order_input_with_blank_channel_rejected(self, minimal_order):
        minimal_order["channel"] = None
        order = OrderInput.model_validate(minimal_order)

        with pytest.raises(OrderValidationError) as exc_info:
            validate_order(order)

        assert exc_info.value.field == "channel"

    def test_check_order_does_not_raise(self):
        check = check_order({})
        assert not check.ok
        assert check.codes == ["MISSING_FIELD"] * len(REQUIRED_FIELDS)

    @pytest.mark.parametrize("value", ["None", "null"])
    def test_null_like_words_are_values(self, minimal_order, value):
        """Test that a field holding the word "None" or "null" counts as present."""
        minimal_order["order_id"] = value

        assert validate_order(minimal_order).order_id == value
