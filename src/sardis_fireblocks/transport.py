"""
HTTP transport protocol for Fireblocks calls.

Defines the seam where concrete HTTP implementations plug in. The client
signs requests and decodes responses; the transport only moves bytes, so
it can be swapped (or faked in tests) without touching signing logic.

Concrete implementations:
    - HttpxTransport (default, shared httpx.AsyncClient)
    - FakeTransport (tests, returns canned responses)

Contract:
    send(method, path, headers, body) -> (status_code, body_bytes)

A response with any status code is returned, not raised; only failures
to get a response at all become ``TransportError``.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol, runtime_checkable

import httpx

from .constants import Http
from .exceptions import TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Async transport for signed Fireblocks requests."""

    async def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
    ) -> tuple[int, bytes]:
        """Send a request and return the raw response.

        Args:
            method: HTTP method
            path: Path relative to the API base URL (what was signed)
            headers: Complete request headers, including Authorization
            body: Exact body bytes that were hashed into the token

        Returns:
            (status_code, response body bytes)

        Raises:
            TransportError: If no response was received
        """
        ...

    async def close(self) -> None:
        ...


class HttpxTransport:
    """Default transport over a single shared ``httpx.AsyncClient``.

    The client is created lazily and reused across calls; it is safe for
    concurrent use by multiple polling sessions. A client passed in by the
    caller is used as is and never closed here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = Http.TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
            )
            self._owns_client = True
        return self._client

    async def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
    ) -> tuple[int, bytes]:
        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                headers=dict(headers),
                content=body,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {type(e).__name__}: {e}") from e
        return response.status_code, response.content

    async def close(self) -> None:
        """Close the HTTP client if this transport created it.

        An injected client stays open; its owner closes it.
        """
        if not self._owns_client:
            return
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
