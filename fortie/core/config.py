"""
Client Configuration.

Settings are read from ``FORTIE_*`` environment variables (and a ``.env``
file when present), optionally overlaid with a YAML file.

Usage:
    from fortie.core.config import get_settings, load_settings

    settings = get_settings()                  # env / .env
    settings = load_settings("fortie.yaml")    # env overlaid with YAML

YAML layout:
    access_token: ${FORTNOX_ACCESS_TOKEN}
    client_secret: my-secret
    rate_limit: 4
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.fortnox.se/3/"
DEFAULT_RATE_LIMIT = 4


class FortieSettings(BaseSettings):
    """Root configuration for the Fortie client."""

    access_token: SecretStr | None = Field(default=None, description="Fortnox access token")
    client_secret: SecretStr | None = Field(default=None, description="Fortnox client secret")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL of the Fortnox API")
    content_type: str = Field(default="application/json", description="Content-Type header")
    accept: str = Field(default="application/json", description="Accept header")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    rate_limit: int = Field(default=DEFAULT_RATE_LIMIT, ge=1, description="Requests per second")
    max_retries: int | None = Field(default=10, ge=0, description="Retries after HTTP 429, None for no cap")
    throttle: bool = Field(default=False, description="Space requests by 1 / rate_limit")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Structured JSON log output")

    model_config = SettingsConfigDict(
        env_prefix="FORTIE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def require_credentials(self) -> None:
        """Raise ConfigurationError unless both credentials are present."""
        if self.access_token is None or not self.access_token.get_secret_value():
            raise ConfigurationError("Fortnox access token is not configured", "access_token")
        if self.client_secret is None or not self.client_secret.get_secret_value():
            raise ConfigurationError("Fortnox client secret is not configured", "client_secret")

    def headers(self) -> dict[str, str]:
        """Authentication and content negotiation headers."""
        self.require_credentials()
        return {
            "Access-Token": self.access_token.get_secret_value(),
            "Client-Secret": self.client_secret.get_secret_value(),
            "Content-Type": self.content_type,
            "Accept": self.accept,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (without secrets)."""
        return self.model_dump(exclude={"access_token", "client_secret"})


def _resolve_env_reference(value: Any) -> Any:
    """Resolve ``${VAR}`` / ``$VAR`` references from the environment."""
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1])

    if value.startswith("$") and len(value) > 1:
        return os.environ.get(value[1:])

    return value


def load_settings(config_path: str | Path | None = None) -> FortieSettings:
    """
    Load settings from the environment, overlaid with a YAML file.

    Args:
        config_path: Path to a YAML file, None for environment only

    Returns:
        FortieSettings instance
    """
    if config_path is None:
        return FortieSettings()

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping", str(path))

    resolved = {key: _resolve_env_reference(value) for key, value in data.items()}
    # Unset references fall back to the environment instead of overriding it
    overrides = {key: value for key, value in resolved.items() if value is not None}
    logger.info(f"Loaded Fortie configuration from {path}")
    return FortieSettings(**overrides)


def get_settings() -> FortieSettings:
    """Get the settings from the environment."""
    return FortieSettings()
