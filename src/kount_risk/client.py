"""HTTP client for the Kount orders endpoint."""

import logging
from typing import Any

import httpx

from .auth.authenticator import Authenticator
from .config import Settings, settings as default_settings
from .core.base_models import EvaluationOptions
from .core.exceptions import APIError

logger = logging.getLogger(__name__)


class KountClient:
    """Submits order requests to Kount with bearer authentication."""

    def __init__(
        self,
        authenticator: Authenticator,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.authenticator = authenticator
        self.settings = settings or default_settings
        self.http_client = http_client

    def build_orders_url(self, options: EvaluationOptions) -> str:
        """
        Build the orders URL for the given options.

        Only flags that are switched on are sent; excludeDevice=false and
        riskInquiry=false are left off the query string.
        """
        base_url = f"{self.settings.api_base_url(self.authenticator.credentials.environment)}/orders"
        query_params = []

        if options.risk_inquiry:
            query_params.append("riskInquiry=true")
        if options.exclude_device:
            query_params.append("excludeDevice=true")

        if query_params:
            return f"{base_url}?{'&'.join(query_params)}"
        return base_url

    async def submit(
        self,
        payload: dict[str, Any],
        bearer_token: str,
        options: EvaluationOptions | None = None,
    ) -> httpx.Response:
        """
        POST an order request.

        A 401 invalidates the cached token (unless another request already
        replaced it) and retries once with a fresh one. The retry's response
        is returned whatever its status.

        Raises:
            APIError: On timeout or connection failure
            AuthenticationError: If the token refresh after a 401 fails
        """
        options = options or EvaluationOptions()
        url = self.build_orders_url(options)
        merchant_order_id = payload.get("merchantOrderId")

        logger.info("[Kount] Sending order risk inquiry: %s", merchant_order_id)
        response = await self._post(url, payload, bearer_token)

        if response.status_code == 401:
            logger.warning("[Kount] Token rejected for order %s, refreshing and retrying once", merchant_order_id)
            self.authenticator.invalidate(bearer_token)
            fresh_token = await self.authenticator.bearer_token()
            response = await self._post(url, payload, fresh_token)

        logger.info("[Kount] Order %s answered with %s", merchant_order_id, response.status_code)
        return response

    async def _post(self, url: str, payload: dict[str, Any], bearer_token: str) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {bearer_token}",
            "Content-Type": "application/json",
        }
        timeout = self.settings.request_timeout_seconds

        try:
            if self.http_client is not None:
                return await self.http_client.post(url, json=payload, headers=headers, timeout=timeout)
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.post(url, json=payload, headers=headers)

        except httpx.TimeoutException as e:
            logger.error("[Kount] Order request timed out: %s", e)
            raise APIError(f"Kount API timeout after {timeout}s") from e

        except httpx.RequestError as e:
            logger.error("[Kount] Order request connection error: %s", e)
            raise APIError(f"Failed to connect to Kount API: {e}") from e
