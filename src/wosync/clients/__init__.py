"""Outbound clients for the upstream service and the reconciliation pipeline.

Example:
    from wosync.clients import MirrorSyncTrigger, UpstreamClient

    upstream = UpstreamClient(settings.upstream)
    record = upstream.fetch_work_order(56335)

    trigger = MirrorSyncTrigger(settings.mirror_sync)
    result = trigger.trigger_sync()
    if not result.success:
        print(f"Mirror refresh skipped: {result.message}")
"""

from wosync.clients.base import HTTPClientBase
from wosync.clients.mirror_sync import MirrorSyncTrigger
from wosync.clients.upstream import UpstreamClient

__all__ = [
    "HTTPClientBase",
    "MirrorSyncTrigger",
    "UpstreamClient",
]
