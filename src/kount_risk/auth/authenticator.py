"""OAuth client-credentials authentication against Kount."""

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import httpx

from ..config import Settings, settings as default_settings
from ..core.base_models import BearerToken, KountCredentials
from ..core.exceptions import AuthenticationError
from ..core.token_cache import TokenCache, get_token_cache, utc_now

logger = logging.getLogger(__name__)


class Authenticator:
    """
    Obtains and caches Kount bearer tokens.

    Tokens are cached per environment in the injected TokenCache, so every
    Authenticator in the process for the same environment shares one token.
    """

    def __init__(
        self,
        credentials: KountCredentials,
        token_cache: TokenCache | None = None,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.credentials = credentials
        self.token_cache = token_cache if token_cache is not None else get_token_cache()
        self.settings = settings or default_settings
        self.http_client = http_client
        self.clock = clock

    @property
    def environment(self) -> str:
        return self.credentials.environment.value

    @property
    def cache_key(self) -> str:
        return f"kount_bearer_token_{self.environment}"

    async def bearer_token(self) -> str:
        """
        Return a valid bearer token, exchanging credentials on a cache miss.

        Raises:
            AuthenticationError: If the token exchange fails
        """
        cached = self.token_cache.read(self.cache_key)
        if cached is not None and cached.is_valid(self.clock()):
            return cached.token

        return await self._refresh_token()

    def invalidate(self, rejected_token: str | None = None) -> None:
        """
        Drop the cached token so the next call performs a fresh exchange.

        Args:
            rejected_token: Token the provider refused. When given, the cache
                            entry is only dropped if it still holds that token;
                            a newer token stored by another request is kept.
        """
        if rejected_token is not None:
            cached = self.token_cache.read(self.cache_key)
            if cached is None:
                return
            if cached.token != rejected_token:
                logger.info("[Kount] Cached token for %s already replaced, keeping it", self.environment)
                return

        logger.info("[Kount] Invalidating cached token for %s", self.environment)
        self.token_cache.delete(self.cache_key)

    async def _refresh_token(self) -> str:
        url = self.settings.auth_url(self.credentials.environment)
        logger.info("[Kount] Requesting bearer token for %s", self.environment)

        try:
            response = await self._post(url)
        except httpx.TimeoutException as e:
            logger.error("[Kount] Token request timed out for %s: %s", self.environment, e)
            raise AuthenticationError(
                f"Kount token request timed out after {self.settings.auth_timeout_seconds}s",
                self._error_data(f"Timeout: {e}"),
            ) from e
        except httpx.RequestError as e:
            logger.error("[Kount] Token request failed for %s: %s", self.environment, e)
            raise AuthenticationError(
                f"Failed to connect to Kount token endpoint: {e}",
                self._error_data(str(e)),
            ) from e

        body = self._parse_body(response)

        if not response.is_success:
            summary = (body.get("errorSummary") or body.get("error_description")) if isinstance(body, dict) else None
            message = f"Failed to authenticate with Kount: {response.status_code}"
            if summary:
                message = f"{message} {summary}"
            logger.error("[Kount] %s", message)
            raise AuthenticationError(message, self._error_data(message, response.status_code, body))

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            message = "Kount token response did not include an access_token"
            logger.error("[Kount] %s", message)
            raise AuthenticationError(message, self._error_data(message, response.status_code, body))

        expires_in = self._expires_in(body.get("expires_in"))
        expires_at = self.clock() + timedelta(seconds=expires_in - self.settings.token_buffer_seconds)

        self.token_cache.write(
            self.cache_key,
            BearerToken(token=token, expires_at=expires_at),
            ttl_seconds=expires_in,
        )
        logger.info("[Kount] Bearer token for %s valid until %s", self.environment, expires_at.isoformat())
        return token

    async def _post(self, url: str) -> httpx.Response:
        data = {"grant_type": "client_credentials", "scope": self.settings.token_scope}
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        auth = None

        if self.credentials.client_id:
            auth = httpx.BasicAuth(self.credentials.client_id, self.credentials.api_key)
        else:
            # The api key is issued already Base64-encoded for Basic auth
            headers["Authorization"] = f"Basic {self.credentials.api_key}"

        timeout = self.settings.auth_timeout_seconds
        if self.http_client is not None:
            return await self.http_client.post(url, data=data, headers=headers, auth=auth, timeout=timeout)

        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.post(url, data=data, headers=headers, auth=auth)

    def _parse_body(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text

    def _expires_in(self, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("[Kount] Invalid expires_in %r, treating token as already expired", value)
            return 0

    def _error_data(self, message: str, code: int | None = None, details: Any = None) -> dict[str, Any]:
        return {
            "error": "Authentication failed",
            "message": message,
            "code": code,
            "details": details,
        }
