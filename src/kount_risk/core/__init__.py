"""Core schemas, exceptions and token cache for the Kount adapter."""

from .base_models import (
    BearerToken,
    Decision,
    Environment,
    EvaluationMode,
    EvaluationOptions,
    EvaluationResult,
    KountCredentials,
    OrderInput,
)
from .exceptions import APIError, AuthenticationError, KountError, OrderValidationError
from .token_cache import InMemoryTokenCache, TokenCache, get_token_cache

__all__ = [
    "BearerToken",
    "Decision",
    "Environment",
    "EvaluationMode",
    "EvaluationOptions",
    "EvaluationResult",
    "KountCredentials",
    "OrderInput",
    "APIError",
    "AuthenticationError",
    "KountError",
    "OrderValidationError",
    "InMemoryTokenCache",
    "TokenCache",
    "get_token_cache",
]
