"""Exception taxonomy for the synchronization engine.

Every failure a caller can act on derives from WorkOrderSyncError. The
batch updater isolates exactly this family into its ledger; anything
else is a bug and propagates.

    WorkOrderSyncError
    ├── InvalidInput          malformed id/status, caller must correct
    ├── WorkOrderNotFound     upstream answered with an empty body
    ├── IntegrityViolation    fetched record id != requested id (never retried)
    ├── DirectoryUnavailable  mirror store unreachable, cannot validate assignee
    ├── UpstreamError         non-2xx or transport failure on read/write
    └── MirrorSyncFailure     soft; carried in MirrorSyncResult, never raised to callers
"""

from __future__ import annotations

from typing import Any


class WorkOrderSyncError(Exception):
    """Base class for all engine errors."""


class InvalidInput(WorkOrderSyncError):
    """A work-order id or status id is not a well-formed integer."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r} (expected an integer)")


class WorkOrderNotFound(WorkOrderSyncError):
    """The upstream service has no work order with this id."""

    def __init__(self, work_order_id: int) -> None:
        self.work_order_id = work_order_id
        super().__init__(f"Work order {work_order_id} not found upstream")


class IntegrityViolation(WorkOrderSyncError):
    """The upstream returned a record for a different work order."""

    def __init__(self, requested_id: int, returned_id: Any) -> None:
        self.requested_id = requested_id
        self.returned_id = returned_id
        super().__init__(f"Requested work order {requested_id} but upstream returned Id={returned_id!r}")


class DirectoryUnavailable(WorkOrderSyncError):
    """The field-worker roster could not be read from the mirror store."""


# Operator guidance per upstream status code.
_STATUS_HINTS: dict[int, str] = {
    400: "Invalid request data. Check the work order ID and status.",
    401: "Authentication failed. Check the upstream API token.",
    404: "Work order not found upstream.",
}


class UpstreamError(WorkOrderSyncError):
    """The upstream service rejected a call or could not be reached.

    Attributes:
        operation: "read", "write" or "settings"
        status_code: HTTP status, or None for transport failures and timeouts
        body: Raw response body (or transport error text)
        work_order_id: Work order being processed, when known
        target_status_id: Status the caller asked for, when known
    """

    def __init__(
        self,
        operation: str,
        *,
        status_code: int | None,
        body: str,
        work_order_id: int | None = None,
        target_status_id: int | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        self.work_order_id = work_order_id
        self.target_status_id = target_status_id
        super().__init__(self._format())

    def _format(self) -> str:
        status = f"HTTP {self.status_code}" if self.status_code is not None else "transport error"
        parts = [f"Upstream {self.operation} failed ({status})"]
        if self.work_order_id is not None:
            parts.append(f"work order {self.work_order_id}")
        if self.target_status_id is not None:
            parts.append(f"target status {self.target_status_id}")
        message = ", ".join(parts)
        if self.body:
            message = f"{message}: {self.body}"
        return message

    def with_context(self, *, work_order_id: int, target_status_id: int | None = None) -> UpstreamError:
        """Return a copy carrying the work order and target status for manual retry."""
        return UpstreamError(
            self.operation,
            status_code=self.status_code,
            body=self.body,
            work_order_id=work_order_id,
            target_status_id=target_status_id,
        )

    @property
    def hint(self) -> str:
        """Human-readable guidance for the operator."""
        if self.status_code is None:
            return "Upstream service unreachable or timed out. Try again later."
        if self.status_code >= 500:
            return "Upstream server error. Try again later."
        return _STATUS_HINTS.get(self.status_code, f"Upstream API error: HTTP {self.status_code}")


class MirrorSyncFailure(WorkOrderSyncError):
    """The reconciliation pipeline could not be notified.

    Soft failure: MirrorSyncTrigger converts it into a MirrorSyncResult
    with success=False instead of raising it.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
