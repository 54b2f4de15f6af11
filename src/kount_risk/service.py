"""Order risk evaluation against Kount."""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from .auth.authenticator import Authenticator
from .client import KountClient
from .config import Settings, settings as default_settings
from .core.base_models import EvaluationOptions, EvaluationResult, KountCredentials, OrderInput
from .core.exceptions import APIError, AuthenticationError, OrderValidationError
from .core.token_cache import TokenCache, utc_now
from .transformers.request_builder import RequestBuilder
from .transformers.response_parser import ResponseParser
from .validators.required import validate_order

logger = logging.getLogger(__name__)


class FraudDetectionService:
    """
    Evaluates orders with Kount.

    Callers see three failure types: OrderValidationError before any
    network call, AuthenticationError from the token exchange, and
    APIError for everything that goes wrong afterwards.

    Example:
        async with FraudDetectionService(credentials) as service:
            result = await service.evaluate_order(order, {"mode": "pre_auth"})
    """

    def __init__(
        self,
        credentials: KountCredentials,
        settings: Settings | None = None,
        token_cache: TokenCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or default_settings
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=self.settings.request_timeout_seconds)

        self.authenticator = Authenticator(
            credentials,
            token_cache=token_cache,
            settings=self.settings,
            http_client=self.http_client,
            clock=clock,
        )
        self.client = KountClient(self.authenticator, settings=self.settings, http_client=self.http_client)
        self.request_builder = RequestBuilder(settings=self.settings, clock=clock)
        self.response_parser = ResponseParser(default_decision=self.settings.default_decision)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> "FraudDetectionService":
        """Build a service using the credentials from configuration."""
        settings = settings or default_settings
        if not settings.api_key:
            raise AuthenticationError("Kount API key is not configured (set KOUNT_API_KEY)")
        credentials = KountCredentials(
            api_key=settings.api_key,
            client_id=settings.client_id or None,
            environment=settings.environment,
        )
        return cls(credentials, settings=settings, **kwargs)

    async def evaluate_order(
        self,
        order: Mapping[str, Any] | OrderInput,
        options: Mapping[str, Any] | EvaluationOptions | None = None,
    ) -> EvaluationResult:
        """
        Submit a risk inquiry for an order.

        Args:
            order: Order payload with the required fields
                   (order_id, session_id, total_amount, currency,
                   created_at, channel, payment, customer)
            options: mode (pre_auth/post_auth), risk_inquiry, exclude_device

        Returns:
            Normalized evaluation result

        Raises:
            OrderValidationError: If the order or options are invalid
            AuthenticationError: If Kount rejects the credentials
            APIError: For any other failure
        """
        order_input = validate_order(order)
        evaluation_options = self._parse_options(options)

        try:
            payload = self.request_builder.build(order_input, mode=evaluation_options.mode)
            token = await self.authenticator.bearer_token()
            response = await self.client.submit(payload, token, evaluation_options)
            result = self.response_parser.parse(response)

        except (AuthenticationError, APIError) as e:
            logger.error("[Kount] %s for order %s: %s", type(e).__name__, order_input.order_id, e.message)
            raise

        except Exception as e:
            logger.exception("[Kount] Unexpected error for order %s", order_input.order_id)
            raise APIError(str(e)) from e

        logger.info(
            "[Kount] Fraud evaluation completed for order %s: %s (score: %s)",
            order_input.order_id,
            result.decision.value,
            result.risk_score,
        )
        return result

    def _parse_options(self, options: Mapping[str, Any] | EvaluationOptions | None) -> EvaluationOptions:
        if options is None:
            return EvaluationOptions()
        if isinstance(options, EvaluationOptions):
            return options
        if not isinstance(options, Mapping):
            raise OrderValidationError(
                f"Options must be an object, got {type(options).__name__}",
                field="options",
            )
        # Drop explicit nulls so defaults apply
        cleaned = {key: value for key, value in options.items() if value is not None}
        try:
            return EvaluationOptions.model_validate(cleaned)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            raise OrderValidationError(f"Invalid option {field}: {first['msg']}", field=field) from e

    async def aclose(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "FraudDetectionService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
