# src/wosync/core/mirror/directory.py
"""Read-side access to the mirror store.

FieldWorkerDirectory reads the active roster fresh on every call; nothing
is cached. An unreadable roster raises DirectoryUnavailable and is never
treated as empty (an empty roster reassigns every order).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from wosync.contracts import DirectoryUnavailable, FieldWorker, StatusOption
from wosync.core.mirror.database import MirrorDB
from wosync.core.mirror.schema import fieldworkers_table, status_lookup_table, work_orders_table

logger = structlog.get_logger(__name__)


@runtime_checkable
class DirectoryProtocol(Protocol):
    """Snapshot source for active field-worker identities."""

    def active_field_worker_ids(self) -> frozenset[int]: ...


class FieldWorkerDirectory:
    """Active field-worker roster backed by the mirror ``fieldworkers`` table."""

    def __init__(self, db: MirrorDB) -> None:
        self._db = db

    def active_field_workers(self) -> list[FieldWorker]:
        """Return the current roster ordered by name.

        Raises:
            DirectoryUnavailable: If the mirror store cannot be queried
        """
        query = select(fieldworkers_table.c.id, fieldworkers_table.c.full_name).order_by(fieldworkers_table.c.full_name)
        try:
            with self._db.connection() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            logger.error("field_worker_directory_unavailable", error=str(e))
            raise DirectoryUnavailable(f"Cannot read field-worker roster from mirror store: {e}") from e
        return [FieldWorker(id=row.id, name=row.full_name) for row in rows]

    def active_field_worker_ids(self) -> frozenset[int]:
        """Return ids of every active field worker.

        Raises:
            DirectoryUnavailable: If the mirror store cannot be queried
        """
        ids = frozenset(worker.id for worker in self.active_field_workers())
        logger.debug("field_worker_roster_loaded", count=len(ids))
        return ids


class MirrorStore:
    """Lookups the CLI needs before handing work to the engine."""

    def __init__(self, db: MirrorDB) -> None:
        self._db = db

    def resolve_work_order_id(self, key: str | int) -> int | None:
        """Map an upstream id or a human custom id to the upstream id.

        Numeric keys are tried against both columns since custom ids can
        look numeric. The upstream id wins when both match.

        Returns:
            The upstream integer id, or None when the mirror has no match
        """
        text_key = str(key).strip()
        conditions = [work_orders_table.c.rs_custom_id == text_key]
        if text_key.isdigit():
            conditions.append(work_orders_table.c.rs_id == int(text_key))
        query = select(work_orders_table.c.rs_id).where(or_(*conditions))
        try:
            with self._db.connection() as conn:
                matches = [row.rs_id for row in conn.execute(query)]
        except SQLAlchemyError as e:
            raise DirectoryUnavailable(f"Cannot resolve work order {text_key!r} from mirror store: {e}") from e

        if not matches:
            return None
        if text_key.isdigit() and int(text_key) in matches:
            return int(text_key)
        if len(matches) > 1:
            logger.warning("custom_id_ambiguous", key=text_key, matches=matches)
        return max(matches)

    def statuses(self, *, incomplete_only: bool = False) -> list[StatusOption]:
        """Return the status catalog ordered by description."""
        query = select(status_lookup_table).order_by(status_lookup_table.c.status_description)
        if incomplete_only:
            query = query.where(status_lookup_table.c.is_complete.is_(False))
        try:
            with self._db.connection() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            raise DirectoryUnavailable(f"Cannot read status catalog from mirror store: {e}") from e
        return [
            StatusOption(id=row.status_id, description=row.status_description, is_complete=bool(row.is_complete))
            for row in rows
        ]
