"""
Tests for FireblocksClient and HttpxTransport.
"""
from __future__ import annotations

import hashlib
import json

import httpx
import jwt
import pytest

from conftest import FakeTransport, json_response, tx_response
from sardis_fireblocks import FireblocksClient, RequestSigner
from sardis_fireblocks.constants import EMPTY_BODY_HASH
from sardis_fireblocks.exceptions import DecodeError, SignError, TransportError
from sardis_fireblocks.models import (
    DestinationTransferPeerPath,
    OneTimeAddress,
    PeerType,
    RequestOptions,
    TransactionArguments,
    TransferPeerPath,
)
from sardis_fireblocks.status import TransactionStatus
from sardis_fireblocks.transport import HttpxTransport


def _claims(request, public_key):
    token = request.headers["Authorization"].removeprefix("Bearer ")
    return jwt.decode(token, public_key, algorithms=["RS256"])


def _transfer_args() -> TransactionArguments:
    return TransactionArguments(
        asset_id="ETH_TEST5",
        source=TransferPeerPath(id="0"),
        destination=DestinationTransferPeerPath(
            peer_type=PeerType.ONE_TIME_ADDRESS,
            one_time_address=OneTimeAddress(address="0xabc"),
        ),
        amount="0.01",
    )


class TestRequestHeaders:
    """Tests for authentication headers."""

    async def test_get_headers(self, client, transport, public_key, api_key):
        """Should send bearer token and API key without a body."""
        transport.queue(tx_response("PENDING"))
        await client.get_transaction("tx-1")

        request = transport.calls[0]
        assert request.method == "GET"
        assert request.path == "/v1/transactions/tx-1"
        assert request.body is None
        assert request.headers["X-API-Key"] == api_key
        assert request.headers["Authorization"].startswith("Bearer ")
        assert "Content-Type" not in request.headers

        claims = _claims(request, public_key)
        assert claims["uri"] == "/v1/transactions/tx-1"
        assert claims["bodyHash"] == EMPTY_BODY_HASH

    async def test_post_body_matches_body_hash(self, client, transport, public_key):
        """Should hash exactly the bytes that are sent."""
        transport.queue(json_response({"id": "tx-7", "status": "SUBMITTED"}))
        await client.create_transaction(_transfer_args())

        request = transport.calls[0]
        assert request.method == "POST"
        assert request.path == "/v1/transactions"
        assert request.headers["Content-Type"] == "application/json"
        assert _claims(request, public_key)["bodyHash"] == hashlib.sha256(request.body).hexdigest()

    async def test_post_body_is_compact_camel_case(self, client, transport):
        """Should serialize camelCase JSON without None fields."""
        transport.queue(json_response({"id": "tx-7", "status": "SUBMITTED"}))
        await client.create_transaction(_transfer_args())

        body = transport.calls[0].body
        assert b", " not in body
        payload = json.loads(body)
        assert payload["assetId"] == "ETH_TEST5"
        assert payload["operation"] == "TRANSFER"
        assert payload["source"] == {"type": "VAULT_ACCOUNT", "id": "0"}
        assert payload["destination"] == {
            "type": "ONE_TIME_ADDRESS",
            "oneTimeAddress": {"address": "0xabc"},
        }
        assert "note" not in payload

    async def test_user_agent(self, signer, transport):
        """Should send the package user agent with an optional suffix."""
        client = FireblocksClient(signer, transport, user_agent="my-app/1.0")
        transport.queue(json_response([]))
        await client.get_supported_assets()

        assert transport.calls[0].headers["User-Agent"] == "sardis-fireblocks/0.1.0 my-app/1.0"

    async def test_idempotency_header(self, client, transport, public_key):
        """Should send the idempotency key as a header, outside the signed body."""
        transport.queue(json_response({"id": "tx-7", "status": "SUBMITTED"}))
        await client.create_transaction(_transfer_args(), RequestOptions(idempotency_key="idem-1"))

        assert transport.calls[0].headers["Idempotency-Key"] == "idem-1"


class TestErrorMapping:
    """Tests for response error handling."""

    @pytest.mark.parametrize(
        "status_code,retryable",
        [(400, False), (401, False), (404, False), (408, True), (429, True), (500, True), (503, True)],
    )
    async def test_non_2xx_raises_transport_error(self, client, transport, status_code, retryable):
        """Should raise TransportError carrying the status code."""
        transport.queue(json_response({"message": "nope", "code": 1}, status_code=status_code))

        with pytest.raises(TransportError) as exc_info:
            await client.get_transaction("tx-1")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.retryable is retryable
        assert "nope" in exc_info.value.message

    async def test_invalid_json_raises_decode_error(self, client, transport):
        """Should raise DecodeError for a non-JSON success body."""
        transport.queue((200, b"<html>gateway</html>"))

        with pytest.raises(DecodeError) as exc_info:
            await client.get_transaction("tx-1")
        assert "gateway" in exc_info.value.body

    async def test_missing_status_raises_decode_error(self, client, transport):
        """Should raise DecodeError when status is missing."""
        transport.queue(json_response({"id": "tx-1"}))

        with pytest.raises(DecodeError):
            await client.get_transaction("tx-1")

    async def test_unknown_status_raises_decode_error(self, client, transport):
        """Should raise DecodeError for a status outside the enumeration."""
        transport.queue(tx_response("EXPLODED"))

        with pytest.raises(DecodeError):
            await client.get_transaction("tx-1")

    async def test_transport_failure_propagates(self, client, transport):
        """Should let transport failures through unchanged."""
        transport.queue(TransportError("connection refused"))

        with pytest.raises(TransportError) as exc_info:
            await client.get_transaction("tx-1")
        assert exc_info.value.status_code is None
        assert exc_info.value.retryable is True

    async def test_sign_error_sends_nothing(self, client, transport):
        """Should abort before sending when the token cannot be produced."""
        with pytest.raises(SignError):
            await client.request("GET", "")
        assert transport.calls == []


class TestEndpoints:
    """Tests for endpoint paths and decoding."""

    async def test_get_transaction(self, client, transport):
        """Should decode transaction details."""
        transport.queue(tx_response("COMPLETED", "CONFIRMED", txHash="0xdead", unknownField=1))
        details = await client.get_transaction("tx-1")

        assert details.status is TransactionStatus.COMPLETED
        assert details.sub_status == "CONFIRMED"
        assert details.tx_hash == "0xdead"

    async def test_create_transaction(self, client, transport):
        """Should return the id and initial status."""
        transport.queue(json_response({"id": "tx-7", "status": "SUBMITTED"}))
        created = await client.create_transaction(_transfer_args())

        assert created.id == "tx-7"
        assert created.status is TransactionStatus.SUBMITTED

    async def test_get_vaults(self, client, transport):
        """Should fetch the paged vault list."""
        transport.queue(json_response({
            "accounts": [{"id": "0", "name": "Main", "assets": [{"id": "ETH", "total": "1.5"}]}],
            "paging": {"after": "abc"},
        }))
        page = await client.get_vaults()

        assert transport.calls[0].path == "/v1/vault/accounts_paged"
        assert page.accounts[0].name == "Main"
        assert page.accounts[0].assets[0].total == "1.5"
        assert page.paging.after == "abc"

    async def test_get_vault_and_asset(self, client, transport):
        """Should address vaults and vault assets by id."""
        transport.queue(
            json_response({"id": "3", "name": "Ops", "hiddenOnUI": False}),
            json_response({"id": "ETH", "available": "2"}),
        )
        vault = await client.get_vault("3")
        asset = await client.get_vault_asset("3", "ETH")

        assert [c.path for c in transport.calls] == ["/v1/vault/accounts/3", "/v1/vault/accounts/3/ETH"]
        assert vault.name == "Ops"
        assert asset.available == "2"

    async def test_get_deposit_addresses(self, client, transport):
        """Should list deposit addresses."""
        transport.queue(json_response([{"assetId": "ETH_TEST5", "address": "0xAbC", "type": "Permanent"}]))
        addresses = await client.get_deposit_addresses("0", "ETH_TEST5")

        assert transport.calls[0].path == "/v1/vault/accounts/0/ETH_TEST5/addresses"
        assert addresses[0].address == "0xAbC"

    async def test_get_deposit_addresses_requires_list(self, client, transport):
        """Should reject a non-list response."""
        transport.queue(json_response({"address": "0xAbC"}))
        with pytest.raises(DecodeError):
            await client.get_deposit_addresses("0", "ETH")

    async def test_refresh_vault_balance(self, client, transport):
        """Should POST an empty object with idempotency headers."""
        transport.queue(json_response({"id": "ETH", "total": "3"}))
        asset = await client.refresh_vault_balance("0", "ETH", RequestOptions(idempotency_key="k"))

        request = transport.calls[0]
        assert request.path == "/v1/vault/accounts/0/ETH/balance"
        assert request.body == b"{}"
        assert request.headers["Idempotency-Key"] == "k"
        assert asset.total == "3"

    async def test_create_vault(self, client, transport):
        """Should POST the vault definition."""
        transport.queue(json_response({"id": "9", "name": "Agents", "autoFuel": True}))
        vault = await client.create_vault("Agents", auto_fuel=True)

        assert transport.calls[0].json() == {"name": "Agents", "hiddenOnUI": False, "autoFuel": True}
        assert vault.id == "9"
        assert vault.auto_fuel is True

    async def test_supported_assets_and_wallets(self, client, transport):
        """Should fetch assets and the raw asset wallet page."""
        transport.queue(
            json_response([{"id": "ETH", "name": "Ether", "type": "BASE_ASSET", "decimals": 18}]),
            json_response({"assetWallets": [], "paging": {}}),
        )
        assets = await client.get_supported_assets()
        wallets = await client.get_asset_wallets()

        assert assets[0].decimals == 18
        assert wallets == {"assetWallets": [], "paging": {}}
        assert transport.calls[1].path == "/v1/vault/asset_wallets"


class TestLifecycle:
    """Tests for closing and repr."""

    async def test_context_manager_closes_transport(self, signer):
        """Should close the transport on exit."""
        transport = FakeTransport()
        async with FireblocksClient(signer, transport):
            pass
        assert transport.closed is True

    def test_repr_hides_credentials(self, client, api_key):
        """Should not reveal credentials in repr."""
        assert api_key not in repr(client)


class TestHttpxTransport:
    """Tests for the httpx-backed transport."""

    async def test_sends_exact_bytes(self, rsa_key):
        """Should send the signed path and body unchanged."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content
            seen["api_key"] = request.headers["X-API-Key"]
            return httpx.Response(200, json={"id": "tx-1", "status": "SUBMITTED"})

        http_client = httpx.AsyncClient(
            base_url="https://sandbox-api.fireblocks.io",
            transport=httpx.MockTransport(handler),
        )
        transport = HttpxTransport("https://sandbox-api.fireblocks.io", client=http_client)
        client = FireblocksClient(RequestSigner(rsa_key, "key"), transport)

        created = await client.create_transaction(_transfer_args())
        await client.close()
        await http_client.aclose()

        assert created.id == "tx-1"
        assert seen["url"] == "https://sandbox-api.fireblocks.io/v1/transactions"
        assert seen["body"] == transport_body(_transfer_args())
        assert seen["api_key"] == "key"

    async def test_returns_error_statuses(self):
        """Should return non-2xx responses instead of raising."""
        http_client = httpx.AsyncClient(
            base_url="https://api.fireblocks.io",
            transport=httpx.MockTransport(lambda request: httpx.Response(502, content=b"bad gateway")),
        )
        transport = HttpxTransport("https://api.fireblocks.io", client=http_client)

        status_code, body = await transport.send("GET", "/v1/transactions/x", {})
        await transport.close()
        await http_client.aclose()

        assert status_code == 502
        assert body == b"bad gateway"

    async def test_connection_error_becomes_transport_error(self):
        """Should map httpx errors to a retryable TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http_client = httpx.AsyncClient(
            base_url="https://api.fireblocks.io",
            transport=httpx.MockTransport(handler),
        )
        transport = HttpxTransport("https://api.fireblocks.io", client=http_client)

        with pytest.raises(TransportError) as exc_info:
            await transport.send("GET", "/v1/transactions/x", {})
        await transport.close()
        await http_client.aclose()

        assert exc_info.value.status_code is None
        assert exc_info.value.retryable is True

    async def test_close_leaves_injected_client_open(self):
        """Should not close a client owned by the caller."""
        http_client = httpx.AsyncClient(
            base_url="https://api.fireblocks.io",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})),
        )
        transport = HttpxTransport("https://api.fireblocks.io", client=http_client)

        await transport.send("GET", "/v1/supported_assets", {})
        await transport.close()

        assert http_client.is_closed is False
        status_code, _ = await transport.send("GET", "/v1/supported_assets", {})
        assert status_code == 200
        await http_client.aclose()

    async def test_close_closes_own_client(self):
        """Should close the client it created itself."""
        transport = HttpxTransport("https://api.fireblocks.io")
        own_client = transport._get_client()

        await transport.close()

        assert own_client.is_closed is True

    def test_strips_trailing_slash(self):
        """Should normalize the base URL."""
        assert HttpxTransport("https://api.fireblocks.io/").base_url == "https://api.fireblocks.io"


def transport_body(args: TransactionArguments) -> bytes:
    return json.dumps(args.to_body(), separators=(",", ":")).encode("utf-8")
