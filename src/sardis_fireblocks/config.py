"""Configuration surface for sardis-fireblocks.

Settings load from ``FIREBLOCKS_*`` environment variables or a ``.env``
file. The private key may be given inline (``FIREBLOCKS_PRIVATE_KEY``) or
as a path (``FIREBLOCKS_PRIVATE_KEY_PATH``).
"""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import Auth, Http, Polling, RetryDefaults
from .exceptions import ConfigurationError
from .models import FeeLevel
from .retry import RetryConfig


class ApiBaseUrl(str, Enum):
    """Fireblocks API hosts. Request paths carry the ``/v1`` prefix."""
    PRODUCTION = "https://api.fireblocks.io"
    SANDBOX = "https://sandbox-api.fireblocks.io"
    EU = "https://eu-api.fireblocks.io"
    EU2 = "https://eu2-api.fireblocks.io"


class FireblocksSettings(BaseSettings):
    """Fireblocks client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIREBLOCKS_",
        env_file=".env",
        extra="ignore",
    )

    # Credentials
    api_key: SecretStr = SecretStr("")
    private_key: Optional[SecretStr] = None
    private_key_path: Optional[Path] = None

    # Endpoint
    api_base_url: str = ApiBaseUrl.SANDBOX.value
    http_timeout_seconds: float = Http.TIMEOUT
    user_agent: Optional[str] = None

    # Account
    chain_id: int = 11155111
    vault_account_id: str = "0"
    rpc_url: Optional[str] = None
    note: str = "Created by sardis-fireblocks"

    # Transfers
    fee_level: FeeLevel = FeeLevel.MEDIUM
    one_time_addresses_enabled: bool = True

    # JWT window (exp - iat). 30s default; 55s is also accepted.
    jwt_expiry_seconds: int = Auth.JWT_EXPIRY_SECONDS

    # Transaction tracking
    poll_interval_seconds: float = Field(default=Polling.INTERVAL, gt=0)
    timeout_seconds: float = Field(default=Polling.TIMEOUT, gt=0)
    max_poll_retries: int = Field(default=RetryDefaults.MAX_RETRIES, ge=0)
    retry_base_delay_seconds: float = Field(default=RetryDefaults.BASE_DELAY, ge=0)

    # Logging
    log_transaction_status_changes: bool = False
    log_requests_and_responses: bool = False

    @field_validator("jwt_expiry_seconds")
    @classmethod
    def _check_expiry(cls, value: int) -> int:
        if not Auth.JWT_EXPIRY_MIN_SECONDS <= value <= Auth.JWT_EXPIRY_MAX_SECONDS:
            raise ValueError(
                f"jwt_expiry_seconds must be between {Auth.JWT_EXPIRY_MIN_SECONDS} "
                f"and {Auth.JWT_EXPIRY_MAX_SECONDS}"
            )
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def read_private_key(self) -> str:
        """Return the PEM text from ``private_key`` or ``private_key_path``.

        Raises:
            ConfigurationError: If neither is set or the file is unreadable
        """
        if self.private_key is not None and self.private_key.get_secret_value().strip():
            return self.private_key.get_secret_value()
        if self.private_key_path is not None:
            try:
                return self.private_key_path.read_text()
            except OSError as e:
                raise ConfigurationError(
                    f"Could not read private key from {self.private_key_path}: {e}"
                ) from e
        raise ConfigurationError(
            "Fireblocks private key is required (FIREBLOCKS_PRIVATE_KEY or FIREBLOCKS_PRIVATE_KEY_PATH)"
        )

    def require_api_key(self) -> str:
        value = self.api_key.get_secret_value()
        if not value:
            raise ConfigurationError("Fireblocks API key is required (FIREBLOCKS_API_KEY)")
        return value

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_poll_retries,
            base_delay=self.retry_base_delay_seconds,
        )


@lru_cache
def load_settings(env_file: str | None = None) -> FireblocksSettings:
    """Load FireblocksSettings once per process.

    Without ``env_file`` the default ``.env`` in the working directory is read.
    """
    if env_file:
        return FireblocksSettings(_env_file=Path(env_file))
    return FireblocksSettings()
