"""Mirror store: read-only access to the local replica database."""

from wosync.core.mirror.database import MirrorDB
from wosync.core.mirror.directory import DirectoryProtocol, FieldWorkerDirectory, MirrorStore
from wosync.core.mirror.schema import (
    fieldworkers_table,
    metadata,
    status_lookup_table,
    work_orders_table,
)

__all__ = [
    "DirectoryProtocol",
    "FieldWorkerDirectory",
    "MirrorDB",
    "MirrorStore",
    "fieldworkers_table",
    "metadata",
    "status_lookup_table",
    "work_orders_table",
]
