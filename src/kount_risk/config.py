"""Kount adapter configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.base_models import Decision, Environment


class Settings(BaseSettings):
    """Adapter settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KOUNT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    environment: Environment = Environment.SANDBOX
    api_key: str = ""
    client_id: str = ""

    # Endpoints (Kount Commerce v2)
    sandbox_auth_url: str = "https://login.kount.com/oauth2/ausdppkujzCPQuIrY357/v1/token"
    production_auth_url: str = "https://login.kount.com/oauth2/ausdppksgrbyM0abp357/v1/token"
    sandbox_api_base_url: str = "https://api-sandbox.kount.com/commerce/v2"
    production_api_base_url: str = "https://api.kount.com/commerce/v2"

    # OAuth client credentials
    token_scope: str = "k1_integration_api"
    token_buffer_seconds: int = 30  # renew slightly before the provider expires the token

    # Timeouts (seconds)
    auth_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 10.0

    # Request mapping defaults
    default_channel: str = "WEB"
    default_processor: str = "FLUID_DEFAULT"
    default_account_type: str = "PRO_ACCOUNT"
    default_fulfillment_status: str = "PENDING"

    # Response normalization
    default_decision: Decision = Decision.REVIEW

    # Logging
    log_level: str = "INFO"

    def auth_url(self, environment: Environment) -> str:
        """Token endpoint for the given environment."""
        if environment == Environment.PRODUCTION:
            return self.production_auth_url
        return self.sandbox_auth_url

    def api_base_url(self, environment: Environment) -> str:
        """Commerce API base URL for the given environment."""
        if environment == Environment.PRODUCTION:
            return self.production_api_base_url
        return self.sandbox_api_base_url


settings = Settings()
