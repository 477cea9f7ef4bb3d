"""Synchronization engine: reassignment policy, single and batch updaters.

Example:
    from wosync.engine import BatchUpdater, SingleOrderUpdater

    updater = SingleOrderUpdater.from_settings(settings, upstream, directory, trigger)
    outcome = updater.update_status(56335, 2)

    ledger = BatchUpdater(updater, delay_seconds=1.0).update_many(items)
"""

from wosync.engine.batch import CANCELLED_MESSAGE, BatchUpdater
from wosync.engine.envelope import append_annotation, build_envelope, reassignment_annotation
from wosync.engine.policy import decide, is_unassigned
from wosync.engine.retry import (
    MaxRetriesExceeded,
    RetryConfig,
    RetryManager,
    is_transient_upstream_error,
)
from wosync.engine.updater import SingleOrderUpdater, parse_integer

__all__ = [
    "CANCELLED_MESSAGE",
    "BatchUpdater",
    "MaxRetriesExceeded",
    "RetryConfig",
    "RetryManager",
    "SingleOrderUpdater",
    "append_annotation",
    "build_envelope",
    "decide",
    "is_transient_upstream_error",
    "is_unassigned",
    "parse_integer",
    "reassignment_annotation",
]
