"""
Pytest configuration and fixtures for sardis-fireblocks tests.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from sardis_fireblocks import (
    FireblocksClient,
    RequestSigner,
    RetryConfig,
    TransactionTracker,
)

Response = tuple[int, bytes]


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: Optional[bytes]

    def json(self) -> Any:
        return json.loads(self.body) if self.body is not None else None


@dataclass
class FakeTransport:
    """In-memory transport that records requests and replays queued responses.

    Resolution order per call: ``handler`` if set, then the queue, then
    ``default``. Queued exceptions are raised instead of returned.
    """

    responses: list[Union[Response, BaseException]] = field(default_factory=list)
    default: Optional[Union[Response, BaseException]] = None
    handler: Optional[Callable[[str, str, Optional[bytes]], Response]] = None
    calls: list[RecordedRequest] = field(default_factory=list)
    closed: bool = False

    def queue(self, *items: Union[Response, BaseException]) -> None:
        self.responses.extend(items)

    async def send(self, method, path, headers, body=None) -> Response:
        self.calls.append(RecordedRequest(method, path, dict(headers), body))
        await asyncio.sleep(0)
        if self.handler is not None:
            item = self.handler(method, path, body)
        elif self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError(f"No response queued for {method} {path}")
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Deterministic clock: ``sleep`` advances time instead of waiting."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)
        await asyncio.sleep(0)


def json_response(payload: Any, status_code: int = 200) -> Response:
    return status_code, json.dumps(payload).encode("utf-8")


def tx_response(
    status: str,
    sub_status: str = "",
    tx_id: str = "tx-1",
    **extra: Any,
) -> Response:
    return json_response({"id": tx_id, "status": status, "subStatus": sub_status, **extra})


# ==================== Keys ====================

@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def public_key(rsa_key):
    return rsa_key.public_key()


@pytest.fixture
def api_key() -> str:
    return "3f1c2d9e-api-key-test"


# ==================== Components ====================

@pytest.fixture
def signer(rsa_key, api_key) -> RequestSigner:
    return RequestSigner(rsa_key, api_key)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(signer, transport) -> FireblocksClient:
    return FireblocksClient(signer, transport)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(max_retries=3, base_delay=0.01, jitter=0.0)


@pytest.fixture
def tracker(client, clock, retry_config) -> TransactionTracker:
    return TransactionTracker(
        client,
        clock=clock,
        retry=retry_config,
        poll_interval=1.0,
        timeout=60.0,
    )
