"""Fireblocks request authentication.

Every call to the Fireblocks API carries a short-lived RS256 JWT bound to
the request it authenticates:

    {
        "uri": "/v1/transactions",      # request path, no host
        "nonce": "<uuid4>",             # fresh per call
        "iat": 1700000000,              # unix seconds
        "exp": 1700000030,              # iat + expiry window
        "sub": "<api key>",
        "bodyHash": "<sha256 hex>"      # of the exact bytes sent
    }

The signer is stateless: nonce and clock are drawn on every call, so one
instance can be shared by any number of concurrent tasks.
"""
from __future__ import annotations

import hashlib
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Union

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .constants import Auth
from .exceptions import SignError

PrivateKey = Union[RSAPrivateKey, str, bytes]


def body_hash(body: Optional[bytes]) -> str:
    """Hex SHA-256 of the request body, or of ``b""`` when there is none."""
    if body is None:
        return Auth.EMPTY_BODY_HASH
    return hashlib.sha256(body).hexdigest()


@dataclass(frozen=True)
class Claims:
    """JWT claims for a single request."""

    uri: str
    nonce: str
    iat: int
    exp: int
    sub: str
    body_hash: str

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["bodyHash"] = payload.pop("body_hash")
        return payload


def build_claims(
    path: str,
    api_key: str,
    body: Optional[bytes] = None,
    *,
    expiry_seconds: int = Auth.JWT_EXPIRY_SECONDS,
    now: Optional[float] = None,
) -> Claims:
    """Build fresh claims for ``path``/``body``.

    ``now`` overrides the wall clock (unix seconds); the nonce is always new.
    """
    issued_at = int(time.time() if now is None else now)
    return Claims(
        uri=path,
        nonce=str(uuid.uuid4()),
        iat=issued_at,
        exp=issued_at + expiry_seconds,
        sub=api_key,
        body_hash=body_hash(body),
    )


def load_private_key(pem: Union[str, bytes], password: Optional[bytes] = None) -> RSAPrivateKey:
    """Parse a PEM-encoded RSA private key.

    Raises:
        SignError: If the PEM is malformed or is not an RSA private key
    """
    data = pem.encode() if isinstance(pem, str) else pem
    try:
        key = serialization.load_pem_private_key(data.strip(), password=password)
    except (ValueError, TypeError) as e:
        raise SignError(f"Could not parse RSA private key: {e}") from e
    if not isinstance(key, RSAPrivateKey):
        raise SignError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


class RequestSigner:
    """Produces one signed token per outbound Fireblocks request.

    Args:
        private_key: Parsed RSA key, or PEM text/bytes
        api_key: Fireblocks API key, used as the ``sub`` claim
        expiry_seconds: Token lifetime (``exp - iat``)
        time_fn: Wall-clock source in unix seconds. Inject for tests.
    """

    def __init__(
        self,
        private_key: PrivateKey,
        api_key: str,
        expiry_seconds: int = Auth.JWT_EXPIRY_SECONDS,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        if not api_key:
            raise SignError("API key is required")
        if expiry_seconds <= 0:
            raise SignError(f"expiry_seconds must be positive, got {expiry_seconds}")
        if isinstance(private_key, (str, bytes)):
            private_key = load_private_key(private_key)
        self._private_key = private_key
        self._api_key = api_key
        self._expiry_seconds = expiry_seconds
        self._time_fn = time_fn or time.time

    @classmethod
    def from_pem(
        cls,
        pem: Union[str, bytes],
        api_key: str,
        expiry_seconds: int = Auth.JWT_EXPIRY_SECONDS,
    ) -> "RequestSigner":
        return cls(load_private_key(pem), api_key, expiry_seconds)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def expiry_seconds(self) -> int:
        return self._expiry_seconds

    def sign(self, path: str, body: Optional[bytes] = None) -> str:
        """Sign a request.

        Args:
            path: Request path without host, e.g. ``/v1/transactions/abc``
            body: Exact request body bytes; None for requests without a body

        Returns:
            Compact RS256 JWT

        Raises:
            SignError: If the inputs are invalid or encoding fails
        """
        if not path:
            raise SignError("Request path is required")
        if body is not None and not isinstance(body, (bytes, bytearray)):
            raise SignError(f"Request body must be bytes, got {type(body).__name__}")

        claims = build_claims(
            path,
            self._api_key,
            bytes(body) if body is not None else None,
            expiry_seconds=self._expiry_seconds,
            now=self._time_fn(),
        )
        try:
            return jwt.encode(
                claims.to_payload(),
                self._private_key,
                algorithm=Auth.JWT_ALGORITHM,
            )
        except (jwt.PyJWTError, ValueError, TypeError, AttributeError) as e:
            raise SignError(f"Could not sign JWT for {path}: {e}") from e

    def __repr__(self) -> str:
        return (
            f"RequestSigner(api_key='[REDACTED]', private_key='[REDACTED]', "
            f"expiry_seconds={self._expiry_seconds})"
        )
