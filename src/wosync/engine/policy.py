# src/wosync/engine/policy.py
"""Field-worker reassignment policy.

A pure decision function: no I/O, no clock, no configuration lookup. The
fallback identity is passed in by the caller (from
``reassignment.fallback_field_worker_id``) so that a deactivated fallback
is a configuration fix, not a code change.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from wosync.contracts import ReassignmentDecision, ReassignmentReason


def is_unassigned(field_worker_id: Any) -> bool:
    """True for the upstream's spellings of "nobody": absent, null, or 0."""
    return field_worker_id is None or field_worker_id == 0


def decide(
    current_field_worker_id: Any,
    active_ids: Collection[int],
    fallback_field_worker_id: int,
) -> ReassignmentDecision:
    """Decide whether the current assignee must be replaced before writing.

    Args:
        current_field_worker_id: FieldWorkerId from the fetched record
        active_ids: Active roster snapshot from the field-worker directory
        fallback_field_worker_id: Catch-all worker assigned on reassignment

    Returns:
        ReassignmentDecision; reason is None when no reassignment is needed
    """
    if is_unassigned(current_field_worker_id):
        return ReassignmentDecision(
            reassign=True,
            new_field_worker_id=fallback_field_worker_id,
            reason=ReassignmentReason.UNASSIGNED,
        )
    if current_field_worker_id not in active_ids:
        return ReassignmentDecision(
            reassign=True,
            new_field_worker_id=fallback_field_worker_id,
            reason=ReassignmentReason.DEACTIVATED,
        )
    return ReassignmentDecision(reassign=False, new_field_worker_id=current_field_worker_id)
