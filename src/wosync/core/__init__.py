"""Core infrastructure: configuration, logging, mirror store access."""

from wosync.core.config import (
    BatchSettings,
    MirrorSettings,
    MirrorSyncSettings,
    ReassignmentSettings,
    UpstreamSettings,
    WorkOrderSyncSettings,
    load_settings,
    resolve_config,
)
from wosync.core.logging import configure_logging, get_logger

__all__ = [
    "BatchSettings",
    "MirrorSettings",
    "MirrorSyncSettings",
    "ReassignmentSettings",
    "UpstreamSettings",
    "WorkOrderSyncSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
    "resolve_config",
]
