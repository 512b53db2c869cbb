"""
Transaction lifecycle tracking for Fireblocks.

Polls ``GET /v1/transactions/{id}`` until the transaction reaches a
terminal status or the local wait budget runs out.

Features:
- Budget measured from session start through an injectable clock
- Sleep never overshoots the remaining budget
- Bounded retry with backoff for transient transport failures
- Independent sessions; any number may run concurrently

Example usage:
    ```python
    tracker = TransactionTracker(client, timeout=120.0)
    details = await tracker.wait_for_completion(tx_id)
    print(details.tx_hash)
    ```

Cancelling the task that runs a session stops polling promptly. Nothing
is sent to Fireblocks on cancellation; the remote transaction is left
as it is.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from .clock import Clock, SystemClock
from .constants import Polling
from .exceptions import TrackingTimeoutError, TxError
from .models import TransactionDetails
from .retry import RetryConfig, retry_async
from .status import StatusClass, TransactionStatus, classify_status

logger = logging.getLogger(__name__)

CompletionHandler = Callable[[TransactionDetails], Union[Any, Awaitable[Any]]]


@dataclass
class PollSession:
    """State of one bounded wait for a single transaction."""
    transaction_id: str
    session_start: float
    timeout_budget: float
    poll_interval: float
    polls: int = 0
    last_status: Optional[TransactionStatus] = None

    def elapsed(self, clock: Clock) -> float:
        return clock.monotonic() - self.session_start

    def remaining(self, clock: Clock) -> float:
        return max(0.0, self.timeout_budget - self.elapsed(clock))

    def expired(self, clock: Clock) -> bool:
        return self.elapsed(clock) >= self.timeout_budget


class TransactionTracker:
    """
    Waits for Fireblocks transactions to reach a terminal status.

    The tracker itself holds no per-transaction state, so one instance can
    serve many concurrent sessions over a shared client.

    Args:
        client: Client whose ``get_transaction`` is polled
        clock: Time source; defaults to the system clock
        retry: Retry policy for transport errors while polling
        poll_interval: Seconds between polls
        timeout: Default wait budget in seconds
        log_status_changes: Log each observed status transition at INFO
    """

    def __init__(
        self,
        client: Any,
        clock: Optional[Clock] = None,
        retry: Optional[RetryConfig] = None,
        poll_interval: float = Polling.INTERVAL,
        timeout: float = Polling.TIMEOUT,
        log_status_changes: bool = False,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._client = client
        self._clock = clock or SystemClock()
        self._retry = retry or RetryConfig()
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._log_status_changes = log_status_changes

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = seconds

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    async def wait_for_completion(
        self,
        transaction_id: str,
        handler: Optional[CompletionHandler] = None,
        *,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> Any:
        """
        Poll until the transaction succeeds, fails, or the budget runs out.

        Args:
            transaction_id: Fireblocks transaction id
            handler: Called with the successful details; its result (awaited
                if needed) is returned. Without a handler the details are
                returned.
            timeout: Override the tracker's wait budget
            poll_interval: Override the tracker's poll interval

        Raises:
            TxError: Fireblocks reported a terminal failure status
            TrackingTimeoutError: The budget ran out first
            TransportError: A poll failed and retries were exhausted
            DecodeError: A status response could not be understood
        """
        session = PollSession(
            transaction_id=transaction_id,
            session_start=self._clock.monotonic(),
            timeout_budget=timeout if timeout is not None else self._timeout,
            poll_interval=poll_interval if poll_interval is not None else self._poll_interval,
        )
        if session.timeout_budget <= 0 or session.poll_interval <= 0:
            raise ValueError("timeout and poll_interval must be positive")

        try:
            while True:
                if session.expired(self._clock):
                    logger.warning(
                        f"Gave up waiting for Fireblocks tx {transaction_id} after "
                        f"{session.polls} polls (last status: "
                        f"{session.last_status.value if session.last_status else 'unknown'})"
                    )
                    raise TrackingTimeoutError(
                        transaction_id,
                        session.timeout_budget,
                        last_status=session.last_status,
                    )

                details = await retry_async(
                    self._client.get_transaction,
                    transaction_id,
                    config=self._retry,
                    sleep=self._clock.sleep,
                )
                session.polls += 1
                self._observe(session, details)

                outcome = classify_status(details.status)
                if outcome is StatusClass.SUCCESS:
                    logger.info(
                        f"Fireblocks tx {transaction_id} reached {details.status.value} "
                        f"after {session.polls} polls"
                    )
                    return await self._complete(details, handler)
                if outcome is StatusClass.FAILURE:
                    logger.error(
                        f"Fireblocks tx {transaction_id} ended as {details.status.value}"
                        f" ({details.sub_status or '-'})"
                    )
                    raise TxError(details.status, details.sub_status, transaction_id)

                await self._clock.sleep(min(session.poll_interval, session.remaining(self._clock)))
        except asyncio.CancelledError:
            logger.info(f"Tracking of Fireblocks tx {transaction_id} cancelled after {session.polls} polls")
            raise

    def track(
        self,
        transaction_id: str,
        handler: Optional[CompletionHandler] = None,
        *,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> "asyncio.Task[Any]":
        """Run ``wait_for_completion`` as a task the caller may cancel."""
        return asyncio.ensure_future(
            self.wait_for_completion(
                transaction_id,
                handler,
                timeout=timeout,
                poll_interval=poll_interval,
            )
        )

    def _observe(self, session: PollSession, details: TransactionDetails) -> None:
        if details.status == session.last_status:
            return
        if self._log_status_changes:
            previous = session.last_status.value if session.last_status else "-"
            logger.info(
                f"Fireblocks tx {session.transaction_id}: {previous} -> "
                f"{details.status.value}"
                + (f" ({details.sub_status})" if details.sub_status else "")
            )
        session.last_status = details.status

    @staticmethod
    async def _complete(details: TransactionDetails, handler: Optional[CompletionHandler]) -> Any:
        if handler is None:
            return details
        result = handler(details)
        if inspect.isawaitable(result):
            result = await result
        return result
