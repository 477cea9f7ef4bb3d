# tests/unit/contracts/test_errors.py
"""Tests for the engine error taxonomy."""

import pytest

from wosync.contracts import (
    DirectoryUnavailable,
    IntegrityViolation,
    InvalidInput,
    MirrorSyncFailure,
    UpstreamError,
    WorkOrderNotFound,
    WorkOrderSyncError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            InvalidInput("status id", "abc"),
            WorkOrderNotFound(99999),
            IntegrityViolation(56335, 56336),
            DirectoryUnavailable("down"),
            UpstreamError("write", status_code=500, body="boom"),
            MirrorSyncFailure("webhook down"),
        ],
    )
    def test_every_error_is_a_sync_error(self, error: WorkOrderSyncError) -> None:
        assert isinstance(error, WorkOrderSyncError)


class TestMessages:
    def test_invalid_input_names_field_and_value(self) -> None:
        error = InvalidInput("status id", "abc")

        assert error.field == "status id"
        assert error.value == "abc"
        assert "status id" in str(error)
        assert "'abc'" in str(error)

    def test_not_found_carries_id(self) -> None:
        error = WorkOrderNotFound(99999)

        assert error.work_order_id == 99999
        assert "99999" in str(error)

    def test_integrity_violation_carries_both_ids(self) -> None:
        error = IntegrityViolation(56335, 11)

        assert error.requested_id == 56335
        assert error.returned_id == 11
        assert "56335" in str(error)
        assert "Id=11" in str(error)


class TestUpstreamError:
    def test_transport_failure_message(self) -> None:
        error = UpstreamError("read", status_code=None, body="ConnectError: refused")

        assert "transport error" in str(error)
        assert "ConnectError: refused" in str(error)

    def test_with_context_adds_retry_details(self) -> None:
        base = UpstreamError("write", status_code=500, body="Internal Server Error")

        enriched = base.with_context(work_order_id=56335, target_status_id=2)

        assert enriched.status_code == 500
        assert enriched.body == "Internal Server Error"
        assert enriched.work_order_id == 56335
        assert enriched.target_status_id == 2
        assert "work order 56335" in str(enriched)
        assert "target status 2" in str(enriched)
        # Original is untouched
        assert base.work_order_id is None

    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [
            (None, "unreachable"),
            (400, "Invalid request data"),
            (401, "Authentication failed"),
            (404, "not found"),
            (500, "server error"),
            (503, "server error"),
            (418, "HTTP 418"),
        ],
    )
    def test_hint_by_status(self, status_code: int | None, expected: str) -> None:
        error = UpstreamError("write", status_code=status_code, body="")

        assert expected in error.hint

    def test_empty_body_is_omitted_from_message(self) -> None:
        error = UpstreamError("write", status_code=401, body="")

        assert str(error) == "Upstream write failed (HTTP 401)"


def test_mirror_sync_failure_keeps_status_code() -> None:
    error = MirrorSyncFailure("Mirror sync webhook returned status 502", status_code=502)

    assert error.status_code == 502
    assert MirrorSyncFailure("timeout").status_code is None
