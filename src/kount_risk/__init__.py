"""Kount order-risk adapter."""

from .core.base_models import (
    Decision,
    Environment,
    EvaluationMode,
    EvaluationOptions,
    EvaluationResult,
    KountCredentials,
    OrderInput,
)
from .core.exceptions import APIError, AuthenticationError, KountError, OrderValidationError
from .service import FraudDetectionService

__version__ = "1.0.0"

__all__ = [
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
    "FraudDetectionService",
]
