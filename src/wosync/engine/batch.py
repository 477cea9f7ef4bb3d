# src/wosync/engine/batch.py
"""BatchUpdater: sequential status changes with a fixed throttle.

Items run strictly one after another. The inter-item delay is a
caller-supplied throttle for upstream rate limits, not adaptive backoff.

Mirror sync is a decision taken once after the loop, not tied to the
position of the last item: it fires exactly once when at least one item
was attempted, regardless of how many failed. An empty batch makes no
upstream or mirror-sync calls at all.

Cancellation is cooperative and only checked between items; an upstream
write that has started always runs to completion because it cannot be
rolled back.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import structlog

from wosync.contracts import BatchItem, BatchLedger, LedgerEntry, UpdaterInfo, WorkOrderSyncError

if TYPE_CHECKING:
    from wosync.engine.updater import SingleOrderUpdater

logger = structlog.get_logger(__name__)

CANCELLED_MESSAGE = "batch cancelled before attempt"

ProgressCallback = Callable[[int, int], None]


class BatchUpdater:
    """Drives SingleOrderUpdater over an ordered list of work orders.

    Example:
        batch = BatchUpdater(updater, delay_seconds=settings.batch.delay_seconds)
        ledger = batch.update_many([BatchItem(1, 2), BatchItem(2, 2)])
        for entry in ledger.failed:
            print(entry.work_order_id, entry.error)
    """

    def __init__(
        self,
        updater: SingleOrderUpdater,
        *,
        delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize batch updater.

        Args:
            updater: Single-order updater used for every item
            delay_seconds: Default pause between consecutive items
            sleep: Sleep function (tests inject a recorder)
        """
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._updater = updater
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    def _pause(self, delay: float, cancel_event: threading.Event | None) -> None:
        if delay <= 0:
            return
        if cancel_event is not None:
            # Wakes early on cancellation
            cancel_event.wait(delay)
        else:
            self._sleep(delay)

    def update_many(
        self,
        items: Sequence[BatchItem],
        *,
        delay_seconds: float | None = None,
        updater_info: UpdaterInfo | None = None,
        cancel_event: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> BatchLedger:
        """Apply every status change in order and account for each one.

        Per-item engine errors are recorded and never abort the batch.

        Args:
            items: Ordered work-order/status pairs
            delay_seconds: Override of the default inter-item delay
            updater_info: Annotation applied to every item
            cancel_event: Set to stop before the next item
            on_progress: Called as (completed, total) after each attempted item

        Returns:
            BatchLedger with one entry per item, in input order
        """
        delay = self._delay_seconds if delay_seconds is None else delay_seconds
        if delay < 0:
            raise ValueError("delay_seconds must be >= 0")

        ledger = BatchLedger()
        total = len(items)
        if total == 0:
            return ledger

        log = logger.bind(batch_size=total)
        log.info("batch_started", delay_seconds=delay)
        attempted = 0

        for index, item in enumerate(items):
            if index > 0:
                self._pause(delay, cancel_event)

            if cancel_event is not None and cancel_event.is_set():
                ledger.cancelled = True
                ledger.entries.extend(
                    LedgerEntry(work_order_id=rest.work_order_id, success=False, error=CANCELLED_MESSAGE, attempted=False)
                    for rest in items[index:]
                )
                log.warning("batch_cancelled", attempted=attempted, skipped=total - index)
                break

            attempted += 1
            try:
                outcome = self._updater.update_status(
                    item.work_order_id,
                    item.status_id,
                    updater_info,
                    suppress_mirror_sync=True,
                )
            except WorkOrderSyncError as e:
                log.warning(
                    "batch_item_failed",
                    work_order_id=item.work_order_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                ledger.entries.append(LedgerEntry(work_order_id=item.work_order_id, success=False, error=str(e)))
            else:
                ledger.entries.append(LedgerEntry(work_order_id=item.work_order_id, success=True, outcome=outcome))

            if on_progress is not None:
                on_progress(index + 1, total)

        if attempted > 0:
            ledger.mirror_sync = self._updater.trigger_mirror_sync()

        log.info(
            "batch_completed",
            succeeded=len(ledger.succeeded),
            failed=len(ledger.failed),
            cancelled=ledger.cancelled,
        )
        return ledger
