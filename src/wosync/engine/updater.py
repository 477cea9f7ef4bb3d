# src/wosync/engine/updater.py
"""SingleOrderUpdater: one logical status change against the upstream.

Read-modify-write protocol:

    validate inputs -> fetch -> reassignment policy -> build envelope
    -> write -> (optional) mirror sync -> outcome

Failure semantics:
- InvalidInput, WorkOrderNotFound, IntegrityViolation: reported
  immediately, nothing written.
- DirectoryUnavailable: fatal for this update; an unreadable roster is
  never treated as empty.
- UpstreamError on write: reported with work-order id and target status
  so the caller can retry manually. No retry happens here (see
  engine/retry.py for a caller-level policy).
- Mirror sync failure: logged, recorded in the outcome, never raised.

Known limitation: no optimistic-concurrency token is sent with the
write. Two writers updating the same work order between one's read and
write will silently overwrite each other (last write wins).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from wosync.contracts import (
    DEFAULT_SERVER_OWNED_FIELDS,
    FIELD_FIELD_WORKER_ID,
    FIELD_STATUS_ID,
    InvalidInput,
    MirrorSyncResult,
    UpdateOutcome,
    UpdaterInfo,
    UpstreamError,
)
from wosync.engine.envelope import build_envelope
from wosync.engine.policy import decide

if TYPE_CHECKING:
    from wosync.clients.mirror_sync import MirrorSyncTrigger
    from wosync.clients.upstream import UpstreamClient
    from wosync.core.config import WorkOrderSyncSettings
    from wosync.core.mirror.directory import DirectoryProtocol

logger = structlog.get_logger(__name__)

_INTEGER_TEXT = re.compile(r"^\s*\d+\s*$")


def parse_integer(field: str, value: Any) -> int:
    """Validate a caller-supplied id without silent coercion.

    Accepts ints and strings of decimal digits. Rejects bools, floats,
    negative numbers, and any other text.

    Raises:
        InvalidInput: If value is not a well-formed non-negative integer
    """
    if isinstance(value, bool):
        raise InvalidInput(field, value)
    if isinstance(value, int):
        if value < 0:
            raise InvalidInput(field, value)
        return value
    if isinstance(value, str) and _INTEGER_TEXT.match(value):
        return int(value)
    raise InvalidInput(field, value)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SingleOrderUpdater:
    """Applies one status change to one work order.

    Example:
        updater = SingleOrderUpdater.from_settings(settings, upstream, directory, trigger)
        outcome = updater.update_status(56335, 2, UpdaterInfo("Dana"))
        if outcome.field_worker_reassigned:
            print(f"Reassigned to {outcome.new_field_worker_id}")
    """

    def __init__(
        self,
        upstream: UpstreamClient,
        directory: DirectoryProtocol,
        mirror_sync: MirrorSyncTrigger,
        *,
        fallback_field_worker_id: int,
        server_owned_fields: Iterable[str] = DEFAULT_SERVER_OWNED_FIELDS,
        stamp_modified_date: bool = False,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize updater.

        Args:
            upstream: Client for the authoritative service
            directory: Active field-worker roster source
            mirror_sync: Trigger fired after a successful write
            fallback_field_worker_id: Catch-all worker used on reassignment
            server_owned_fields: Fields stripped from every envelope
            stamp_modified_date: Re-stamp LastChangeDate/ModifiedDate with now
            clock: Source of "now" for annotations and date stamps
        """
        self._upstream = upstream
        self._directory = directory
        self._mirror_sync = mirror_sync
        self._fallback_field_worker_id = fallback_field_worker_id
        self._server_owned_fields = tuple(server_owned_fields)
        self._stamp_modified_date = stamp_modified_date
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: WorkOrderSyncSettings,
        upstream: UpstreamClient,
        directory: DirectoryProtocol,
        mirror_sync: MirrorSyncTrigger,
    ) -> SingleOrderUpdater:
        return cls(
            upstream,
            directory,
            mirror_sync,
            fallback_field_worker_id=settings.reassignment.fallback_field_worker_id,
            server_owned_fields=settings.upstream.server_owned_fields,
            stamp_modified_date=settings.upstream.stamp_modified_date,
        )

    def trigger_mirror_sync(self) -> MirrorSyncResult:
        """Fire the mirror-sync trigger. Never raises."""
        return self._mirror_sync.trigger_sync()

    def update_status(
        self,
        work_order_id: Any,
        new_status_id: Any,
        updater_info: UpdaterInfo | None = None,
        *,
        suppress_mirror_sync: bool = False,
    ) -> UpdateOutcome:
        """Change a work order's status, reassigning it first if required.

        Args:
            work_order_id: Upstream work-order id (int or digit string)
            new_status_id: Target status id (int or digit string)
            updater_info: Who performed the change; annotated on the description
            suppress_mirror_sync: Skip the mirror-sync trigger (batch mode)

        Returns:
            UpdateOutcome describing what was written

        Raises:
            InvalidInput: Malformed id or status (before any network call)
            WorkOrderNotFound: Upstream has no such work order
            IntegrityViolation: Upstream returned a different record
            DirectoryUnavailable: Active roster could not be read
            UpstreamError: Read or write rejected/unreachable
        """
        wo_id = parse_integer("work order id", work_order_id)
        status_id = parse_integer("status id", new_status_id)
        log = logger.bind(work_order_id=wo_id, target_status_id=status_id)

        record = self._upstream.fetch_work_order(wo_id)
        old_status_id = record.get(FIELD_STATUS_ID)
        old_field_worker_id = record.get(FIELD_FIELD_WORKER_ID)

        active_ids = self._directory.active_field_worker_ids()
        decision = decide(old_field_worker_id, active_ids, self._fallback_field_worker_id)
        if decision.reassign:
            if self._fallback_field_worker_id not in active_ids:
                log.warning(
                    "fallback_field_worker_inactive",
                    fallback_field_worker_id=self._fallback_field_worker_id,
                )
            log.info(
                "field_worker_reassigned",
                old_field_worker_id=old_field_worker_id,
                new_field_worker_id=decision.new_field_worker_id,
                reason=decision.reason,
            )

        now = self._clock()
        envelope = build_envelope(
            record,
            new_status_id=status_id,
            decision=decision,
            updater_annotation=updater_info.annotation(now.date()) if updater_info is not None else None,
            server_owned_fields=self._server_owned_fields,
            modified_at=now if self._stamp_modified_date else None,
        )

        try:
            write_result = self._upstream.write_work_order(envelope)
        except UpstreamError as e:
            log.error("work_order_write_failed", status_code=e.status_code, hint=e.hint)
            raise e.with_context(work_order_id=wo_id, target_status_id=status_id) from e

        log.info("work_order_status_updated", old_status_id=old_status_id)

        mirror_sync = None
        if not suppress_mirror_sync:
            mirror_sync = self.trigger_mirror_sync()

        return UpdateOutcome(
            work_order_id=wo_id,
            old_status_id=old_status_id,
            new_status_id=status_id,
            old_field_worker_id=old_field_worker_id,
            new_field_worker_id=envelope.get(FIELD_FIELD_WORKER_ID),
            field_worker_reassigned=decision.reassign,
            reassignment_reason=decision.reason,
            write_result=write_result,
            mirror_sync=mirror_sync,
        )
