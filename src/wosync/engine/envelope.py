# src/wosync/engine/envelope.py
"""Update-envelope construction.

The upstream write is a full-record overwrite, so the envelope starts as a
copy of the record just read and only the targeted fields change:

- StatusId: always overwritten with the validated target
- FieldWorkerId: overwritten when the reassignment policy fired
- Description: annotations appended, each at most once
- server-owned timestamps: removed (optionally re-stamped with "now")

Every other field is carried through verbatim.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from wosync.contracts import (
    FIELD_DESCRIPTION,
    FIELD_FIELD_WORKER_ID,
    FIELD_STATUS_ID,
    MODIFIED_DATE_FIELDS,
    ReassignmentDecision,
    ReassignmentReason,
    WorkOrder,
)


def reassignment_annotation(prior_field_worker_id: Any, reason: ReassignmentReason) -> str:
    """Annotation recording who the order was taken from and why."""
    if reason is ReassignmentReason.UNASSIGNED:
        return "(reassigned from unassigned)"
    return f"(reassigned from {reason.value} FW {prior_field_worker_id})"


def append_annotation(description: Any, annotation: str) -> str:
    """Append ``annotation`` unless the description already contains it.

    Resubmitting the same update must not grow the description, so the
    presence check is on the exact annotation text.
    """
    text = "" if description is None else str(description)
    if annotation in text:
        return text
    if not text:
        return annotation
    return f"{text.rstrip()} {annotation}"


def format_upstream_date(moment: datetime) -> str:
    """Render a timestamp in the upstream's ``/Date(<epoch-ms>)/`` form."""
    return f"/Date({int(moment.timestamp() * 1000)})/"


def build_envelope(
    record: WorkOrder,
    *,
    new_status_id: int,
    decision: ReassignmentDecision,
    updater_annotation: str | None = None,
    server_owned_fields: Iterable[str] = (),
    modified_at: datetime | None = None,
) -> WorkOrder:
    """Build the write payload from a freshly fetched record.

    Args:
        record: Record returned by the upstream read (not mutated)
        new_status_id: Validated target status
        decision: Reassignment policy output for this record
        updater_annotation: "(status updated by ...)" text, if any
        server_owned_fields: Fields the upstream regenerates; removed
        modified_at: When set, LastChangeDate/ModifiedDate are re-stamped
            with this time after the server-owned fields are removed

    Returns:
        New dict ready for UpstreamClient.write_work_order()
    """
    envelope = copy.deepcopy(record)

    if decision.reassign:
        assert decision.reason is not None
        prior = record.get(FIELD_FIELD_WORKER_ID)
        envelope[FIELD_FIELD_WORKER_ID] = decision.new_field_worker_id
        envelope[FIELD_DESCRIPTION] = append_annotation(
            envelope.get(FIELD_DESCRIPTION),
            reassignment_annotation(prior, decision.reason),
        )

    envelope[FIELD_STATUS_ID] = new_status_id

    if updater_annotation is not None:
        envelope[FIELD_DESCRIPTION] = append_annotation(envelope.get(FIELD_DESCRIPTION), updater_annotation)

    for name in server_owned_fields:
        envelope.pop(name, None)

    if modified_at is not None:
        stamp = format_upstream_date(modified_at)
        for name in MODIFIED_DATE_FIELDS:
            envelope[name] = stamp

    return envelope
