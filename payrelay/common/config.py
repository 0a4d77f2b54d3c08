"""Central environment-driven settings for the gateway process.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


PAYEVO_TRANSACTIONS_URL = "https://apiv2.payevo.com.br/functions/v1/transactions"


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payrelay-gateway"
    environment: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    upstream_url: str = PAYEVO_TRANSACTIONS_URL
    upstream_secret_key: SecretStr = SecretStr("")
    upstream_timeout_seconds: float = 5.0
    cors_allow_origins: str = "*"
    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


settings = CommonSettings()
