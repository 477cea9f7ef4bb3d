"""Operation outcomes and results.

These types answer: "What did an operation produce?"

- ReassignmentDecision: output of the pure reassignment policy
- WriteResult: what the upstream said to a write
- MirrorSyncResult: soft outcome of a mirror refresh notification
- UpdateOutcome: full account of one status change
- LedgerEntry / BatchLedger: per-item accounting of a batch
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from wosync.contracts.enums import ReassignmentReason


@dataclass(frozen=True, slots=True)
class ReassignmentDecision:
    """Whether the assignee must change before the write proceeds.

    When reassign is False, new_field_worker_id equals the current
    assignee and reason is None.
    """

    reassign: bool
    new_field_worker_id: int | None
    reason: ReassignmentReason | None = None


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Upstream response to a successful write.

    body is the parsed JSON when the upstream returned any, else None.
    """

    status_code: int
    body: Any = None


@dataclass(frozen=True, slots=True)
class MirrorSyncResult:
    """Outcome of a mirror-sync notification. Never raised, only returned."""

    success: bool
    message: str
    triggered_at: datetime
    status_code: int | None = None


@dataclass(frozen=True, slots=True)
class UpdateOutcome:
    """Result of one status change written upstream."""

    work_order_id: int
    old_status_id: Any
    new_status_id: int
    old_field_worker_id: Any
    new_field_worker_id: Any
    field_worker_reassigned: bool
    reassignment_reason: ReassignmentReason | None
    write_result: WriteResult
    mirror_sync: MirrorSyncResult | None = None

    @property
    def mirror_sync_triggered(self) -> bool:
        """True when the mirror-sync trigger was invoked for this update."""
        return self.mirror_sync is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_order_id": self.work_order_id,
            "old_status_id": self.old_status_id,
            "new_status_id": self.new_status_id,
            "old_field_worker_id": self.old_field_worker_id,
            "new_field_worker_id": self.new_field_worker_id,
            "field_worker_reassigned": self.field_worker_reassigned,
            "reassignment_reason": self.reassignment_reason.value if self.reassignment_reason else None,
            "mirror_sync_triggered": self.mirror_sync_triggered,
        }


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """Per-item record in a batch ledger.

    attempted is False only for items skipped after cancellation.
    """

    work_order_id: Any
    success: bool
    error: str | None = None
    outcome: UpdateOutcome | None = None
    attempted: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_order_id": self.work_order_id,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class BatchLedger:
    """Ordered per-item accounting returned from a batch update.

    The caller decides whether partial success is acceptable.
    """

    entries: list[LedgerEntry] = field(default_factory=list)
    mirror_sync: MirrorSyncResult | None = None
    cancelled: bool = False

    def __iter__(self) -> Iterator[LedgerEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> LedgerEntry:
        return self.entries[index]

    @property
    def succeeded(self) -> list[LedgerEntry]:
        return [e for e in self.entries if e.success]

    @property
    def failed(self) -> list[LedgerEntry]:
        return [e for e in self.entries if not e.success]

    @property
    def all_succeeded(self) -> bool:
        return all(e.success for e in self.entries)

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self.entries]


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    """Result of an upstream connectivity probe."""

    success: bool
    message: str
