"""Validation utilities for inbound orders."""

from .base import FieldIssue, OrderCheck
from .currency import CurrencyValidator
from .nulls import compact, is_blank, normalize_null
from .required import REQUIRED_FIELDS, check_order, validate_order
from .timestamps import format_optional_time, format_order_time, format_timestamp, parse_timestamp

__all__ = [
    "FieldIssue",
    "OrderCheck",
    "CurrencyValidator",
    "compact",
    "is_blank",
    "normalize_null",
    "REQUIRED_FIELDS",
    "check_order",
    "validate_order",
    "format_optional_time",
    "format_order_time",
    "format_timestamp",
    "parse_timestamp",
]
