"""
Fireblocks REST client.

Every call is signed with a fresh JWT over its path and exact body bytes,
sent through a pluggable transport, and decoded into models.

Example usage:
    ```python
    from sardis_fireblocks import FireblocksClient, FireblocksSettings

    settings = FireblocksSettings()
    async with FireblocksClient.from_settings(settings) as client:
        tx = await client.get_transaction("b3c4...")
        print(tx.status, tx.sub_status)
    ```
"""
from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from .auth import RequestSigner
from .constants import VERSION, Http, Paths
from .exceptions import DecodeError, TransportError
from .logging_utils import mask_secret
from .models import (
    CreateTransactionResponse,
    CreateVaultRequest,
    DepositAddress,
    FireblocksModel,
    PagedVaultAccounts,
    RequestOptions,
    SupportedAsset,
    TransactionArguments,
    TransactionDetails,
    VaultAccount,
    VaultAsset,
)
from .transport import HttpxTransport, Transport

if TYPE_CHECKING:
    from .config import FireblocksSettings

logger = logging.getLogger(__name__)

JsonBody = Union[Mapping[str, Any], FireblocksModel]


def encode_body(body: JsonBody) -> bytes:
    """Serialize a request body once; these bytes are both hashed and sent."""
    if isinstance(body, FireblocksModel):
        body = body.to_body()
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def _decode(method: str, path: str, raw: bytes) -> Any:
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        text = raw.decode("utf-8", errors="replace")
        raise DecodeError(f"{method} {path} returned non-JSON body: {e}", body=text) from e


def _error_message(raw: bytes) -> str:
    try:
        payload = json.loads(raw)
    except ValueError:
        return raw.decode("utf-8", errors="replace")[:200]
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


class FireblocksClient:
    """
    Authenticated Fireblocks API client.

    Args:
        signer: Request signer holding the RSA key and API key
        transport: Transport that delivers signed requests
        user_agent: Optional suffix appended to the default User-Agent
        log_requests: Log method, path and status of every call at DEBUG
    """

    def __init__(
        self,
        signer: RequestSigner,
        transport: Transport,
        user_agent: Optional[str] = None,
        log_requests: bool = False,
    ) -> None:
        self._signer = signer
        self._transport = transport
        self._user_agent = user_agent
        self._log_requests = log_requests

    @classmethod
    def from_settings(
        cls,
        settings: "FireblocksSettings",
        transport: Optional[Transport] = None,
    ) -> "FireblocksClient":
        signer = RequestSigner(
            settings.read_private_key(),
            settings.require_api_key(),
            expiry_seconds=settings.jwt_expiry_seconds,
        )
        if transport is None:
            transport = HttpxTransport(
                settings.api_base_url,
                timeout=settings.http_timeout_seconds,
            )
        return cls(
            signer,
            transport,
            user_agent=settings.user_agent,
            log_requests=settings.log_requests_and_responses,
        )

    @property
    def user_agent(self) -> str:
        base = f"{Http.USER_AGENT_PREFIX}/{VERSION}"
        if self._user_agent:
            return f"{base} {self._user_agent}"
        return base

    # ==================== Low-level HTTP ====================

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[JsonBody] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Sign, send and decode one request.

        Raises:
            SignError: If the token cannot be produced; nothing is sent
            TransportError: On network failure or a non-2xx response
            DecodeError: If a 2xx response is not JSON
        """
        content = encode_body(body) if body is not None else None
        token = self._signer.sign(path, content)

        request_headers = {
            "Authorization": f"Bearer {token}",
            "X-API-Key": self._signer.api_key,
            "User-Agent": self.user_agent,
        }
        if content is not None:
            request_headers["Content-Type"] = "application/json"
        if headers:
            request_headers.update(headers)

        status_code, raw = await self._transport.send(method, path, request_headers, content)

        if self._log_requests:
            logger.debug(
                f"{method} {path} -> {status_code} ({len(raw)} bytes, "
                f"api key {mask_secret(self._signer.api_key)})"
            )

        if not 200 <= status_code < 300:
            raise TransportError(
                f"{method} {path} unsuccessful ({status_code}): {_error_message(raw)}",
                status_code=status_code,
            )
        return _decode(method, path, raw)

    async def get_request(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post_request(
        self,
        path: str,
        body: JsonBody,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.request("POST", path, body, headers)

    # ==================== Transactions ====================

    async def create_transaction(
        self,
        args: TransactionArguments,
        options: Optional[RequestOptions] = None,
    ) -> CreateTransactionResponse:
        """Create a transaction. Returns its id and initial status."""
        logger.debug(f"Creating transaction for asset {args.asset_id} ({args.operation})")
        headers = options.to_headers() if options else None
        data = await self.post_request(Paths.TRANSACTIONS, args, headers)
        response = CreateTransactionResponse.from_response(data)
        logger.info(f"Fireblocks tx submitted: {response.id} ({response.status.value})")
        return response

    async def get_transaction(self, tx_id: str) -> TransactionDetails:
        """Get the current state of a transaction."""
        data = await self.get_request(f"{Paths.TRANSACTIONS}/{tx_id}")
        return TransactionDetails.from_response(data)

    # ==================== Vaults ====================

    async def get_vaults(self) -> PagedVaultAccounts:
        data = await self.get_request(Paths.VAULT_ACCOUNTS_PAGED)
        return PagedVaultAccounts.from_response(data)

    async def get_vault(self, vault_id: str) -> VaultAccount:
        data = await self.get_request(f"{Paths.VAULT_ACCOUNTS}/{vault_id}")
        return VaultAccount.from_response(data)

    async def get_vault_asset(self, vault_id: str, asset_id: str) -> VaultAsset:
        data = await self.get_request(f"{Paths.VAULT_ACCOUNTS}/{vault_id}/{asset_id}")
        return VaultAsset.from_response(data)

    async def get_deposit_addresses(self, vault_id: str, asset_id: str) -> list[DepositAddress]:
        data = await self.get_request(f"{Paths.VAULT_ACCOUNTS}/{vault_id}/{asset_id}/addresses")
        if not isinstance(data, list):
            raise DecodeError("Expected a list of deposit addresses", body=repr(data))
        return [DepositAddress.from_response(item) for item in data]

    async def refresh_vault_balance(
        self,
        vault_id: str,
        asset_id: str,
        options: Optional[RequestOptions] = None,
    ) -> VaultAsset:
        """Ask Fireblocks to refresh a vault asset balance."""
        headers = options.to_headers() if options else None
        data = await self.post_request(
            f"{Paths.VAULT_ACCOUNTS}/{vault_id}/{asset_id}/balance",
            {},
            headers,
        )
        return VaultAsset.from_response(data)

    async def create_vault(
        self,
        name: str,
        hidden_on_ui: bool = False,
        customer_ref_id: Optional[str] = None,
        auto_fuel: bool = False,
    ) -> VaultAccount:
        """Create a vault account."""
        body = CreateVaultRequest(
            name=name,
            hidden_on_ui=hidden_on_ui,
            customer_ref_id=customer_ref_id,
            auto_fuel=auto_fuel,
        )
        data = await self.post_request(Paths.VAULT_ACCOUNTS, body)
        vault = VaultAccount.from_response(data)
        logger.info(f"Created Fireblocks vault account: {vault.id}")
        return vault

    # ==================== Assets ====================

    async def get_supported_assets(self) -> list[SupportedAsset]:
        data = await self.get_request(Paths.SUPPORTED_ASSETS)
        if not isinstance(data, list):
            raise DecodeError("Expected a list of supported assets", body=repr(data))
        return [SupportedAsset.from_response(item) for item in data]

    async def get_asset_wallets(self) -> dict[str, Any]:
        """Raw ``/v1/vault/asset_wallets`` page."""
        data = await self.get_request(Paths.ASSET_WALLETS)
        if not isinstance(data, dict):
            raise DecodeError("Expected an asset wallets page", body=repr(data))
        return data

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "FireblocksClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"FireblocksClient(signer={self._signer!r}, transport={type(self._transport).__name__})"
