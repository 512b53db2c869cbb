"""Exception hierarchy for sardis-fireblocks.

All package exceptions inherit from FireblocksError, enabling:
- A single ``except FireblocksError`` at integration boundaries
- Machine-readable error codes for API responses and logs
- Structured details via ``to_dict()``

Taxonomy:
    SignError            key or encoding failure; abort the request
    TransportError       network/HTTP failure; retried while polling
    DecodeError          response lacks the expected fields; not retried
    TxError              remote reports a terminal failure status
    TrackingTimeoutError local wait budget exceeded

Usage:
    from sardis_fireblocks.exceptions import TxError, TrackingTimeoutError

    try:
        details = await tracker.wait_for_completion(tx_id)
    except TxError as e:
        logger.error("tx %s ended as %s (%s)", tx_id, e.status, e.sub_status)
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from .constants import Http

if TYPE_CHECKING:
    from .status import TransactionStatus


class FireblocksError(Exception):
    """Base exception for all sardis-fireblocks errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Optional additional context
    """

    error_code: str = "FIREBLOCKS_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dict."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(FireblocksError):
    """Missing or invalid configuration."""

    error_code = "CONFIGURATION_ERROR"


class SignError(FireblocksError):
    """The request token could not be produced.

    The request must be aborted; never send it without a complete token.
    """

    error_code = "SIGN_ERROR"


class TransportError(FireblocksError):
    """Network or HTTP-level failure.

    ``status_code`` is None when the request never got a response
    (connection refused, TLS error, read timeout).
    """

    error_code = "TRANSPORT_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.status_code = status_code
        if retryable is None:
            retryable = (
                status_code is None
                or status_code >= 500
                or status_code in Http.RETRYABLE_CLIENT_STATUSES
            )
        self.retryable = retryable


class DecodeError(FireblocksError):
    """Response body is not JSON or lacks the expected id/status fields."""

    error_code = "DECODE_ERROR"

    def __init__(self, message: str, body: Optional[str] = None) -> None:
        details = {}
        if body is not None:
            # Keep only a prefix; responses can be large
            details["body"] = body[:512]
        super().__init__(message, details=details)
        self.body = body


class TxError(FireblocksError):
    """Fireblocks reported a terminal failure status for a transaction."""

    error_code = "TRANSACTION_FAILED"

    def __init__(
        self,
        status: "TransactionStatus",
        sub_status: str = "",
        transaction_id: Optional[str] = None,
    ) -> None:
        status_value = getattr(status, "value", status)
        message = (
            f"Transaction was not completed successfully. "
            f"Final status: {status_value}. Sub status: {sub_status or '-'}"
        )
        details: dict[str, Any] = {"status": status_value, "sub_status": sub_status}
        if transaction_id:
            details["transaction_id"] = transaction_id
        super().__init__(message, details=details)
        self.status = status
        self.sub_status = sub_status
        self.transaction_id = transaction_id


class TrackingTimeoutError(FireblocksError, TimeoutError):
    """Local wait budget exceeded before a terminal status was observed.

    Distinct from the remote ``TIMEOUT`` status. The transaction may still
    be progressing on the Fireblocks side; it has not been cancelled.
    """

    error_code = "TRACKING_TIMEOUT"

    def __init__(
        self,
        transaction_id: str,
        timeout: float,
        last_status: Optional["TransactionStatus"] = None,
    ) -> None:
        last_value = getattr(last_status, "value", last_status)
        super().__init__(
            f"Timed out after {timeout:.2f}s waiting for transaction {transaction_id} "
            f"(last status: {last_value or 'unknown'})",
            details={
                "transaction_id": transaction_id,
                "timeout_seconds": timeout,
                "last_status": last_value,
            },
        )
        self.transaction_id = transaction_id
        self.timeout = timeout
        self.last_status = last_status


class UnsupportedChainError(FireblocksError):
    """No Fireblocks asset is known for the chain id."""

    error_code = "UNSUPPORTED_CHAIN"

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chain_id: {chain_id}", details={"chain_id": chain_id})
        self.chain_id = chain_id
