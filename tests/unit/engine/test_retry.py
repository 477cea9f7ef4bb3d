# tests/unit/engine/test_retry.py
"""Tests for RetryManager and the transient-error classifier."""

import pytest

from wosync.contracts import IntegrityViolation, InvalidInput, UpstreamError, WorkOrderNotFound
from wosync.engine import MaxRetriesExceeded, RetryConfig, RetryManager, is_transient_upstream_error


def _fast(max_attempts: int = 3) -> RetryManager:
    return RetryManager(RetryConfig(max_attempts=max_attempts, base_delay=0.01, max_delay=0.05, jitter=0.0))


class TestTransientClassifier:
    @pytest.mark.parametrize("status_code", [None, 500, 502, 503, 408, 429])
    def test_transient(self, status_code: int | None) -> None:
        assert is_transient_upstream_error(UpstreamError("write", status_code=status_code, body=""))

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404, 409])
    def test_not_transient(self, status_code: int) -> None:
        assert not is_transient_upstream_error(UpstreamError("write", status_code=status_code, body=""))

    @pytest.mark.parametrize(
        "error",
        [InvalidInput("status id", "x"), WorkOrderNotFound(1), IntegrityViolation(1, 2), ValueError("x")],
    )
    def test_other_errors_never_transient(self, error: BaseException) -> None:
        assert not is_transient_upstream_error(error)


class TestRetryManager:
    def test_retries_transient_then_succeeds(self) -> None:
        call_count = 0

        def flaky() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise UpstreamError("write", status_code=503, body="busy")
            return "ok"

        assert _fast().execute_with_retry(flaky) == "ok"
        assert call_count == 3

    def test_non_retryable_propagates_unchanged(self) -> None:
        call_count = 0

        def rejected() -> None:
            nonlocal call_count
            call_count += 1
            raise UpstreamError("write", status_code=400, body="bad")

        with pytest.raises(UpstreamError) as exc_info:
            _fast().execute_with_retry(rejected)

        assert exc_info.value.status_code == 400
        assert call_count == 1

    def test_integrity_violation_never_retried(self) -> None:
        call_count = 0

        def mismatched() -> None:
            nonlocal call_count
            call_count += 1
            raise IntegrityViolation(56335, 11)

        with pytest.raises(IntegrityViolation):
            _fast().execute_with_retry(mismatched)

        assert call_count == 1

    def test_max_attempts_exceeded_keeps_last_error(self) -> None:
        def always_down() -> None:
            raise UpstreamError("read", status_code=None, body="ConnectError")

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            _fast(max_attempts=2).execute_with_retry(always_down)

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.last_error, UpstreamError)

    def test_on_retry_called_before_each_retry_only(self) -> None:
        attempts: list[int] = []

        def always_down() -> None:
            raise UpstreamError("write", status_code=500, body="")

        with pytest.raises(MaxRetriesExceeded):
            _fast(max_attempts=3).execute_with_retry(
                always_down,
                on_retry=lambda attempt, error: attempts.append(attempt),
            )

        assert attempts == [1, 2]

    def test_custom_classifier(self) -> None:
        call_count = 0

        def flaky() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ValueError("transient")
            return "ok"

        result = _fast().execute_with_retry(flaky, is_retryable=lambda e: isinstance(e, ValueError))

        assert result == "ok"


class TestRetryConfig:
    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            RetryConfig(max_attempts=0)

    def test_no_retry(self) -> None:
        assert RetryConfig.no_retry().max_attempts == 1

    def test_single_attempt_wraps_transient_error(self) -> None:
        def down() -> None:
            raise UpstreamError("write", status_code=502, body="")

        with pytest.raises(MaxRetriesExceeded) as exc_info:
            RetryManager(RetryConfig.no_retry()).execute_with_retry(down)

        assert exc_info.value.attempts == 1
