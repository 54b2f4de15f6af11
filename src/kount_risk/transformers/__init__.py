"""Transformers between the internal order shape and the Kount wire schema."""

from .request_builder import RequestBuilder
from .response_parser import ResponseParser, normalize_decision, normalize_reason_codes

__all__ = [
    "RequestBuilder",
    "ResponseParser",
    "normalize_decision",
    "normalize_reason_codes",
]
