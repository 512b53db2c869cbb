"""Fireblocks custody client: signed requests and transaction tracking."""

from .constants import VERSION as __version__
from .accounts import AccountCache, normalize_address
from .auth import Claims, RequestSigner, body_hash, build_claims, load_private_key
from .client import FireblocksClient
from .clock import Clock, SystemClock
from .config import ApiBaseUrl, FireblocksSettings, load_settings
from .exceptions import (
    ConfigurationError,
    DecodeError,
    FireblocksError,
    SignError,
    TrackingTimeoutError,
    TransportError,
    TxError,
    UnsupportedChainError,
)
from .fireblocks_signer import FireblocksSigner, extract_signature
from .logging_utils import mask_address, mask_secret, setup_logging
from .models import (
    CreateTransactionResponse,
    DestinationTransferPeerPath,
    FeeLevel,
    OneTimeAddress,
    PeerType,
    RequestOptions,
    TransactionArguments,
    TransactionDetails,
    TransactionOperation,
    TransferPeerPath,
    VaultAccount,
    VaultAsset,
)
from .networks import NETWORKS, ChainId, Network, get_network, is_supported_chain
from .retry import NO_RETRY, RetryConfig, retry_async
from .status import (
    StatusClass,
    TransactionStatus,
    classify_status,
    is_final_status,
    is_successful_status,
)
from .tracker import PollSession, TransactionTracker
from .transport import HttpxTransport, Transport

__all__ = [
    "__version__",
    # Auth
    "Claims",
    "RequestSigner",
    "body_hash",
    "build_claims",
    "load_private_key",
    # Client
    "FireblocksClient",
    "Transport",
    "HttpxTransport",
    # Tracking
    "TransactionTracker",
    "PollSession",
    "Clock",
    "SystemClock",
    "RetryConfig",
    "NO_RETRY",
    "retry_async",
    # Status
    "TransactionStatus",
    "StatusClass",
    "classify_status",
    "is_final_status",
    "is_successful_status",
    # Signer
    "FireblocksSigner",
    "extract_signature",
    "AccountCache",
    "normalize_address",
    # Networks
    "ChainId",
    "Network",
    "NETWORKS",
    "get_network",
    "is_supported_chain",
    # Config
    "ApiBaseUrl",
    "FireblocksSettings",
    "load_settings",
    # Models
    "CreateTransactionResponse",
    "DestinationTransferPeerPath",
    "FeeLevel",
    "OneTimeAddress",
    "PeerType",
    "RequestOptions",
    "TransactionArguments",
    "TransactionDetails",
    "TransactionOperation",
    "TransferPeerPath",
    "VaultAccount",
    "VaultAsset",
    # Errors
    "FireblocksError",
    "ConfigurationError",
    "SignError",
    "TransportError",
    "DecodeError",
    "TxError",
    "TrackingTimeoutError",
    "UnsupportedChainError",
    # Logging
    "setup_logging",
    "mask_secret",
    "mask_address",
]
