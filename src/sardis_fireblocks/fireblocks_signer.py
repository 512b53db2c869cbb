"""Fireblocks custody signer.

Ties a vault account on one chain to the request client and the
transaction tracker: submit a transaction, then wait for Fireblocks to
sign and broadcast it.

Requires:
- FIREBLOCKS_API_KEY environment variable
- FIREBLOCKS_PRIVATE_KEY (RSA private key contents) or FIREBLOCKS_PRIVATE_KEY_PATH
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from .accounts import AccountCache, normalize_address
from .client import FireblocksClient
from .clock import Clock
from .config import FireblocksSettings
from .exceptions import DecodeError, FireblocksError
from .logging_utils import mask_address
from .models import (
    DestinationTransferPeerPath,
    FeeLevel,
    OneTimeAddress,
    PeerType,
    RequestOptions,
    TransactionArguments,
    TransactionDetails,
    TransactionOperation,
    TransferPeerPath,
)
from .networks import Network, get_network
from .tracker import CompletionHandler, TransactionTracker
from .transport import Transport

logger = logging.getLogger(__name__)


def extract_signature(details: TransactionDetails) -> str:
    """Hex signature of the first signed message, ``0x``-prefixed."""
    if not details.signed_messages:
        raise DecodeError(f"Fireblocks tx {details.id} completed without signedMessages")
    signature = details.signed_messages[0].signature
    if signature.full_sig:
        full_sig = signature.full_sig
        return full_sig if full_sig.startswith("0x") else f"0x{full_sig}"

    if signature.r and signature.s and signature.v is not None:
        r_hex = signature.r.removeprefix("0x").zfill(64)
        s_hex = signature.s.removeprefix("0x").zfill(64)
        v = signature.v
        if v < 27:
            v += 27
        return f"0x{r_hex}{s_hex}{v:02x}"
    raise DecodeError(f"Fireblocks tx {details.id} signature payload missing r/s/v")


class FireblocksSigner:
    """Fireblocks MPC signer for one vault account on one chain.

    The chain's Fireblocks asset id comes from the static network table;
    an unsupported chain id fails at construction.
    """

    def __init__(
        self,
        client: FireblocksClient,
        tracker: TransactionTracker,
        chain_id: int,
        vault_account_id: str,
        accounts: Optional[AccountCache] = None,
        note: Optional[str] = None,
        rpc_url: Optional[str] = None,
        fee_level: Optional[FeeLevel] = FeeLevel.MEDIUM,
        one_time_addresses_enabled: bool = True,
    ):
        network = get_network(chain_id)
        if rpc_url:
            network = network.with_rpc_url(rpc_url)
        self._network = network
        self._client = client
        self._tracker = tracker
        self._vault_account_id = str(vault_account_id)
        self._accounts = accounts if accounts is not None else AccountCache()
        self._note = note
        self._fee_level = fee_level
        self._one_time_addresses_enabled = one_time_addresses_enabled
        self._address: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: FireblocksSettings,
        transport: Optional[Transport] = None,
        clock: Optional[Clock] = None,
        accounts: Optional[AccountCache] = None,
    ) -> "FireblocksSigner":
        client = FireblocksClient.from_settings(settings, transport=transport)
        tracker = TransactionTracker(
            client,
            clock=clock,
            retry=settings.retry_config(),
            poll_interval=settings.poll_interval_seconds,
            timeout=settings.timeout_seconds,
            log_status_changes=settings.log_transaction_status_changes,
        )
        return cls(
            client,
            tracker,
            chain_id=settings.chain_id,
            vault_account_id=settings.vault_account_id,
            accounts=accounts,
            note=settings.note,
            rpc_url=settings.rpc_url,
            fee_level=settings.fee_level,
            one_time_addresses_enabled=settings.one_time_addresses_enabled,
        )

    @property
    def network(self) -> Network:
        return self._network

    @property
    def chain_id(self) -> int:
        return self._network.chain_id

    @property
    def asset_id(self) -> str:
        return self._network.asset_id

    @property
    def vault_account_id(self) -> str:
        return self._vault_account_id

    @property
    def address(self) -> Optional[str]:
        """Vault deposit address, once ``resolve_address`` has run."""
        return self._address

    @property
    def accounts(self) -> AccountCache:
        return self._accounts

    @property
    def user_agent(self) -> str:
        return self._client.user_agent

    async def resolve_address(self) -> str:
        """Fetch the vault's deposit address for this chain's asset."""
        addresses = await self._client.get_deposit_addresses(self._vault_account_id, self.asset_id)
        if not addresses:
            raise FireblocksError(
                f"Vault {self._vault_account_id} has no {self.asset_id} deposit address",
                error_code="NO_DEPOSIT_ADDRESS",
            )
        self._address = normalize_address(addresses[0].address)
        self._accounts.add(self._vault_account_id, self._address)
        logger.info(
            f"Fireblocks vault {self._vault_account_id} uses {self.asset_id} "
            f"address {mask_address(self._address)}"
        )
        return self._address

    def add_account(self, account_id: str, address: str) -> None:
        """Register a vault account id for an address."""
        self._accounts.add(account_id, address)

    def account_id_for(self, address: str) -> Optional[str]:
        return self._accounts.get(address)

    def set_timeout(self, seconds: float) -> None:
        """Wait budget for approvals; a transaction not done in time raises TrackingTimeoutError."""
        self._tracker.timeout = seconds

    async def submit_and_wait(
        self,
        args: TransactionArguments,
        handler: Optional[CompletionHandler] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """Create a transaction and wait for it to succeed.

        Returns the handler's result, or the final details without one.
        """
        if args.note is None and self._note:
            args = args.model_copy(update={"note": self._note})
        created = await self._client.create_transaction(args, options)
        return await self._tracker.wait_for_completion(created.id, handler)

    async def transfer(
        self,
        destination: str,
        amount: str,
        note: Optional[str] = None,
        options: Optional[RequestOptions] = None,
    ) -> TransactionDetails:
        """Send ``amount`` of the chain's native asset from the vault.

        Destinations registered in the account cache are sent to as vault
        accounts; anything else goes to a one-time address, if enabled.

        Raises:
            FireblocksError: If the destination is empty, or unknown while
                one-time addresses are disabled
        """
        if not destination or not destination.strip():
            raise FireblocksError("Transfer destination is required", error_code="INVALID_DESTINATION")

        account_id = self._accounts.get(destination)
        if account_id is not None:
            target = DestinationTransferPeerPath(peer_type=PeerType.VAULT_ACCOUNT, id=account_id)
        elif self._one_time_addresses_enabled:
            target = DestinationTransferPeerPath(
                peer_type=PeerType.ONE_TIME_ADDRESS,
                one_time_address=OneTimeAddress(address=destination),
            )
        else:
            raise FireblocksError(
                f"No vault account registered for {mask_address(destination)} "
                f"and one-time addresses are disabled",
                error_code="UNKNOWN_DESTINATION",
            )
        args = TransactionArguments(
            asset_id=self.asset_id,
            source=TransferPeerPath(id=self._vault_account_id),
            destination=target,
            amount=amount,
            note=note,
            fee_level=self._fee_level,
        )
        return await self.submit_and_wait(args, options=options)

    async def sign_raw_message(self, content: str, note: Optional[str] = None) -> str:
        """Sign a hex digest with a RAW operation and return the signature.

        Requires RAW signing to be enabled for the workspace.
        """
        args = TransactionArguments(
            asset_id=self.asset_id,
            operation=TransactionOperation.RAW,
            source=TransferPeerPath(id=self._vault_account_id),
            note=note,
            extra_parameters={
                "rawMessageData": {"messages": [{"content": content.removeprefix("0x")}]},
            },
        )
        return await self.submit_and_wait(args, extract_signature)

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "FireblocksSigner":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return (
            f"FireblocksSigner(chain_id={self.chain_id}, asset_id={self.asset_id!r}, "
            f"vault_account_id={self._vault_account_id!r})"
        )
