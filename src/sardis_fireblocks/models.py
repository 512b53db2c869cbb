"""Request and response models for the Fireblocks REST API.

Only the fields this package reads or sends are modelled; everything else
in a response is ignored.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .exceptions import DecodeError
from .status import TransactionStatus

M = TypeVar("M", bound="FireblocksModel")


class FireblocksModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_body(self) -> dict[str, Any]:
        """Serialize as a request body."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_response(cls: Type[M], data: Any) -> M:
        """Validate a decoded response.

        Raises:
            DecodeError: If required fields are missing or malformed
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected {cls.__name__} response: {e}", body=repr(data)) from e


# =============================================================================
# Enums
# =============================================================================

class TransactionOperation(str, Enum):
    TRANSFER = "TRANSFER"
    RAW = "RAW"
    CONTRACT_CALL = "CONTRACT_CALL"
    TYPED_MESSAGE = "TYPED_MESSAGE"
    MINT = "MINT"
    BURN = "BURN"


class PeerType(str, Enum):
    VAULT_ACCOUNT = "VAULT_ACCOUNT"
    EXCHANGE_ACCOUNT = "EXCHANGE_ACCOUNT"
    INTERNAL_WALLET = "INTERNAL_WALLET"
    EXTERNAL_WALLET = "EXTERNAL_WALLET"
    ONE_TIME_ADDRESS = "ONE_TIME_ADDRESS"
    NETWORK_CONNECTION = "NETWORK_CONNECTION"
    FIAT_ACCOUNT = "FIAT_ACCOUNT"
    COMPOUND = "COMPOUND"


class FeeLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# =============================================================================
# Transactions
# =============================================================================

class OneTimeAddress(FireblocksModel):
    address: str
    tag: Optional[str] = None


class TransferPeerPath(FireblocksModel):
    peer_type: PeerType = Field(default=PeerType.VAULT_ACCOUNT, alias="type")
    id: str


class DestinationTransferPeerPath(FireblocksModel):
    peer_type: PeerType = Field(alias="type")
    id: Optional[str] = None
    one_time_address: Optional[OneTimeAddress] = None


class TransactionArguments(FireblocksModel):
    """Body of ``POST /v1/transactions``."""

    asset_id: str
    operation: TransactionOperation = TransactionOperation.TRANSFER
    source: TransferPeerPath
    destination: Optional[DestinationTransferPeerPath] = None
    amount: str = "0"
    note: Optional[str] = None
    external_tx_id: Optional[str] = None
    fee_level: Optional[FeeLevel] = None
    extra_parameters: Optional[dict[str, Any]] = None


class CreateTransactionResponse(FireblocksModel):
    id: str
    status: TransactionStatus


class Signature(FireblocksModel):
    full_sig: Optional[str] = None
    r: Optional[str] = None
    s: Optional[str] = None
    v: Optional[int] = None


class SignedMessage(FireblocksModel):
    content: Optional[str] = None
    algorithm: Optional[str] = None
    derivation_path: list[int] = Field(default_factory=list)
    signature: Signature = Field(default_factory=Signature)
    public_key: Optional[str] = None


class TransactionDetails(FireblocksModel):
    """Server-owned transaction state from ``GET /v1/transactions/{id}``."""

    id: str
    status: TransactionStatus
    sub_status: str = ""
    asset_id: Optional[str] = None
    tx_hash: Optional[str] = None
    signed_messages: list[SignedMessage] = Field(default_factory=list)


# =============================================================================
# Vaults
# =============================================================================

class VaultAsset(FireblocksModel):
    id: str
    total: Optional[str] = None
    available: Optional[str] = None
    pending: Optional[str] = None
    frozen: Optional[str] = None
    locked_amount: Optional[str] = None
    block_height: Optional[str] = None
    block_hash: Optional[str] = None


class VaultAccount(FireblocksModel):
    id: str
    name: str = ""
    hidden_on_ui: bool = Field(default=False, alias="hiddenOnUI")
    customer_ref_id: Optional[str] = None
    auto_fuel: bool = False
    assets: list[VaultAsset] = Field(default_factory=list)


class Paging(FireblocksModel):
    before: Optional[str] = None
    after: Optional[str] = None


class PagedVaultAccounts(FireblocksModel):
    accounts: list[VaultAccount] = Field(default_factory=list)
    paging: Optional[Paging] = None
    previous_url: Optional[str] = None
    next_url: Optional[str] = None


class CreateVaultRequest(FireblocksModel):
    name: str
    hidden_on_ui: bool = Field(default=False, alias="hiddenOnUI")
    customer_ref_id: Optional[str] = None
    auto_fuel: bool = False


class DepositAddress(FireblocksModel):
    asset_id: Optional[str] = None
    address: str
    tag: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    legacy_address: Optional[str] = None
    customer_ref_id: Optional[str] = None
    address_format: Optional[str] = None


class SupportedAsset(FireblocksModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    contract_address: Optional[str] = None
    native_asset: Optional[str] = None
    decimals: Optional[int] = None


class RequestOptions(FireblocksModel):
    """Per-request options sent as headers, not in the signed body."""

    idempotency_key: Optional[str] = None

    def to_headers(self) -> dict[str, str]:
        if self.idempotency_key:
            return {"Idempotency-Key": self.idempotency_key}
        return {}
