# src/wosync/engine/retry.py
"""RetryManager: caller-level retry policy with tenacity.

The engine components never retry on their own. A caller that wants
transient upstream failures retried wraps a whole update in
RetryManager.execute_with_retry(); every attempt re-reads the record, so
a retry never writes a stale envelope.

Only transient upstream failures qualify (see is_transient_upstream_error).
Input errors, missing work orders and integrity violations are final.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from wosync.contracts import UpstreamError

T = TypeVar("T")

# Statuses worth retrying: throttling and server-side failures.
_TRANSIENT_STATUS_CODES = frozenset({408, 429})


def is_transient_upstream_error(error: BaseException) -> bool:
    """True for upstream failures that may succeed on a later attempt."""
    if not isinstance(error, UpstreamError):
        return False
    if error.status_code is None:
        return True
    return error.status_code >= 500 or error.status_code in _TRANSIENT_STATUS_CODES


class MaxRetriesExceeded(Exception):
    """Raised when max retry attempts are exceeded."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Max retries ({attempts}) exceeded: {last_error}")


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    max_attempts is the TOTAL number of tries, not the number of retries.
    So max_attempts=3 means: try, retry, retry (3 total).
    """

    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    jitter: float = 1.0  # seconds
    exponential_base: float = 2.0  # backoff multiplier

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Factory for no-retry configuration (single attempt)."""
        return cls(max_attempts=1)


class RetryManager:
    """Retries an operation on transient failures.

    Example:
        manager = RetryManager(RetryConfig(max_attempts=3))

        outcome = manager.execute_with_retry(
            operation=lambda: updater.update_status(56335, 2),
            on_retry=lambda attempt, error: print(f"attempt {attempt} failed: {error}"),
        )
    """

    def __init__(self, config: RetryConfig) -> None:
        self._config = config

    def execute_with_retry(
        self,
        operation: Callable[[], T],
        *,
        is_retryable: Callable[[BaseException], bool] = is_transient_upstream_error,
        on_retry: Callable[[int, BaseException], None] | None = None,
    ) -> T:
        """Execute operation with retry logic.

        Args:
            operation: Operation to execute
            is_retryable: Function to check if error is retryable
            on_retry: Optional callback on retry (attempt, error)

        Returns:
            Result of operation

        Raises:
            MaxRetriesExceeded: If max attempts exceeded
            Exception: If non-retryable error occurs
        """
        attempt = 0
        last_error: BaseException | None = None

        try:
            for attempt_state in Retrying(
                stop=stop_after_attempt(self._config.max_attempts),
                wait=wait_exponential_jitter(
                    initial=self._config.base_delay,
                    max=self._config.max_delay,
                    exp_base=self._config.exponential_base,
                    jitter=self._config.jitter,
                ),
                retry=retry_if_exception(is_retryable),
                reraise=False,  # We catch RetryError and convert to MaxRetriesExceeded
            ):
                with attempt_state:
                    attempt = attempt_state.retry_state.attempt_number
                    try:
                        return operation()
                    except Exception as e:
                        last_error = e
                        # Only call on_retry for retryable errors that will be retried
                        if is_retryable(e) and on_retry and attempt < self._config.max_attempts:
                            on_retry(attempt, e)
                        raise

        except RetryError as e:
            # last_error is always set because RetryError means at least one attempt failed
            final_error = last_error or e.last_attempt.exception()
            assert final_error is not None, "RetryError without exception is impossible"
            raise MaxRetriesExceeded(attempt, final_error) from e

        # Should not reach here - Retrying always returns or raises
        raise RuntimeError("Unexpected state in retry loop")  # pragma: no cover
