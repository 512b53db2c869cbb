"""
Centralized constants for sardis-fireblocks.

Single source of truth for the JWT window, polling cadence, retry
defaults and API paths used across the package.

Usage:
    from sardis_fireblocks.constants import Auth, Polling, Paths

All values are organized into logical namespaces using classes.
"""
from __future__ import annotations

from typing import Final

VERSION: Final[str] = "0.1.0"

# =============================================================================
# Authentication
# =============================================================================

class Auth:
    """JWT request-signing configuration."""

    # Token lifetime. Fireblocks accepts up to 60s; 55s is also in use.
    JWT_EXPIRY_SECONDS: Final[int] = 30
    JWT_EXPIRY_MIN_SECONDS: Final[int] = 1
    JWT_EXPIRY_MAX_SECONDS: Final[int] = 60
    JWT_ALGORITHM: Final[str] = "RS256"

    # sha256(b"")
    EMPTY_BODY_HASH: Final[str] = (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


# =============================================================================
# Transaction polling
# =============================================================================

class Polling:
    """Transaction lifecycle tracking defaults (seconds)."""

    INTERVAL: Final[float] = 1.0
    TIMEOUT: Final[float] = 60.0


class RetryDefaults:
    """Retry defaults for transient transport errors while polling."""

    MAX_RETRIES: Final[int] = 3
    BASE_DELAY: Final[float] = 0.5
    MAX_DELAY: Final[float] = 10.0
    EXPONENTIAL_BASE: Final[float] = 2.0
    JITTER: Final[float] = 0.1


# =============================================================================
# HTTP
# =============================================================================

class Http:
    """HTTP client defaults."""

    TIMEOUT: Final[float] = 30.0
    USER_AGENT_PREFIX: Final[str] = "sardis-fireblocks"
    # Status codes worth retrying even though they are 4xx
    RETRYABLE_CLIENT_STATUSES: Final[frozenset[int]] = frozenset({408, 429})


class Paths:
    """Fireblocks REST API paths. The signed ``uri`` claim must match these."""

    TRANSACTIONS: Final[str] = "/v1/transactions"
    VAULT_ACCOUNTS: Final[str] = "/v1/vault/accounts"
    VAULT_ACCOUNTS_PAGED: Final[str] = "/v1/vault/accounts_paged"
    ASSET_WALLETS: Final[str] = "/v1/vault/asset_wallets"
    SUPPORTED_ASSETS: Final[str] = "/v1/supported_assets"


JWT_EXPIRY_SECONDS: Final[int] = Auth.JWT_EXPIRY_SECONDS
EMPTY_BODY_HASH: Final[str] = Auth.EMPTY_BODY_HASH
