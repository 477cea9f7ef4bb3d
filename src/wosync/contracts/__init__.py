"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
wosync.core.config.

Import patterns:
    from wosync.contracts import UpdateOutcome, WorkOrderNotFound
    from wosync.core.config import WorkOrderSyncSettings
"""

from wosync.contracts.enums import MirrorSyncMethod, ReassignmentReason
from wosync.contracts.errors import (
    DirectoryUnavailable,
    IntegrityViolation,
    InvalidInput,
    MirrorSyncFailure,
    UpstreamError,
    WorkOrderNotFound,
    WorkOrderSyncError,
)
from wosync.contracts.results import (
    BatchLedger,
    ConnectionCheck,
    LedgerEntry,
    MirrorSyncResult,
    ReassignmentDecision,
    UpdateOutcome,
    WriteResult,
)
from wosync.contracts.workorder import (
    DEFAULT_SERVER_OWNED_FIELDS,
    FIELD_CUSTOM_ID,
    FIELD_DESCRIPTION,
    FIELD_FIELD_WORKER_ID,
    FIELD_ID,
    FIELD_STATUS_ID,
    MODIFIED_DATE_FIELDS,
    BatchItem,
    FieldWorker,
    StatusOption,
    UpdaterInfo,
    WorkOrder,
)

__all__ = [
    "DEFAULT_SERVER_OWNED_FIELDS",
    "FIELD_CUSTOM_ID",
    "FIELD_DESCRIPTION",
    "FIELD_FIELD_WORKER_ID",
    "FIELD_ID",
    "FIELD_STATUS_ID",
    "MODIFIED_DATE_FIELDS",
    "BatchItem",
    "BatchLedger",
    "ConnectionCheck",
    "DirectoryUnavailable",
    "FieldWorker",
    "IntegrityViolation",
    "InvalidInput",
    "LedgerEntry",
    "MirrorSyncFailure",
    "MirrorSyncMethod",
    "MirrorSyncResult",
    "ReassignmentDecision",
    "ReassignmentReason",
    "StatusOption",
    "UpdateOutcome",
    "UpdaterInfo",
    "UpstreamError",
    "WorkOrder",
    "WorkOrderNotFound",
    "WorkOrderSyncError",
    "WriteResult",
]
