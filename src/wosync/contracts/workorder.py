"""Work-order wire fields and caller-facing input types.

Field names follow the upstream service's JSON (PascalCase). Everything
not named here is opaque and must survive a read-modify-write untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

FIELD_ID = "Id"
FIELD_CUSTOM_ID = "CustomId"
FIELD_STATUS_ID = "StatusId"
FIELD_FIELD_WORKER_ID = "FieldWorkerId"
FIELD_DESCRIPTION = "Description"

# Timestamps the upstream regenerates on every write.
DEFAULT_SERVER_OWNED_FIELDS: tuple[str, ...] = (
    "CreatedDate",
    "CreateDate",
    "LastChangeDate",
    "ModifiedDate",
)

# Subset of the server-owned fields that can be re-stamped with "now".
MODIFIED_DATE_FIELDS: tuple[str, ...] = ("LastChangeDate", "ModifiedDate")

WorkOrder = dict[str, Any]


@dataclass(frozen=True, slots=True)
class FieldWorker:
    """An entry in the active field-worker roster."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class UpdaterInfo:
    """Who performed a status change, and on which day.

    When ``on`` is omitted the current date is used. The annotation is
    day-granular so that same-day resubmissions stay idempotent.
    """

    name: str
    on: date | None = None

    def annotation(self, today: date) -> str:
        day = self.on or today
        return f"(status updated by {self.name} on {day.isoformat()})"


@dataclass(frozen=True, slots=True)
class BatchItem:
    """One requested status change in a batch."""

    work_order_id: Any
    status_id: Any


@dataclass(frozen=True, slots=True)
class StatusOption:
    """An entry in the mirror's status catalog."""

    id: int
    description: str
    is_complete: bool
