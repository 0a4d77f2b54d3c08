"""Redacted startup view of the effective gateway settings."""

from typing import Any

from pydantic import SecretStr

from payrelay.common.config import CommonSettings
from payrelay.common.logging import logger


STARTUP_FIELDS = (
    "environment",
    "host",
    "port",
    "upstream_url",
    "upstream_secret_key",
    "upstream_timeout_seconds",
    "cors_allow_origins",
    "otel_enabled",
)
SECRET_MARKERS = ("key", "secret", "password", "token")


def _redact(name: str, value: Any) -> Any:
    if isinstance(value, SecretStr):
        return "<redacted>" if value.get_secret_value() else "<unset>"
    if any(marker in name for marker in SECRET_MARKERS):
        return "<redacted>" if value else "<unset>"
    return value


def startup_config(app_settings: CommonSettings) -> dict[str, Any]:
    """Settings as resolved from env and `.env`, with credentials masked.

    An empty secret shows as `<unset>` so a missing credential is visible in
    the startup log without leaking a configured one.
    """

    config: dict[str, Any] = {"service": app_settings.service_name}
    for name in STARTUP_FIELDS:
        config[name] = _redact(name, getattr(app_settings, name))
    return config


def log_startup_config(app_settings: CommonSettings) -> None:
    logger.info("startup_config=%s", startup_config(app_settings))
