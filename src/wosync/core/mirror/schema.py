# src/wosync/core/mirror/schema.py
"""SQLAlchemy table definitions for the mirror store.

Uses SQLAlchemy Core (not ORM). The mirror is populated by the external
reconciliation pipeline; wosync only reads it. Column names match what
that pipeline writes.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

# === Field workers ===
# Presence in this table is what "active" means.

fieldworkers_table = Table(
    "fieldworkers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("full_name", String(255), nullable=False),
)

# === Status catalog ===

status_lookup_table = Table(
    "rs_status_lookup",
    metadata,
    Column("status_id", Integer, primary_key=True, autoincrement=False),
    Column("status_description", String(255), nullable=False),
    Column("is_complete", Boolean, nullable=False, default=False),
)

# === Work orders (mirror of upstream) ===

work_orders_table = Table(
    "rs_work_orders",
    metadata,
    Column("rs_id", Integer, primary_key=True, autoincrement=False),
    # Human-readable id; not guaranteed unique across time
    Column("rs_custom_id", String(64)),
    Column("description", Text),
    Column("rs_status_id", Integer, ForeignKey("rs_status_lookup.status_id")),
    # No FK: deactivated workers are removed from fieldworkers but stay referenced here
    Column("rs_field_worker_id", Integer),
    Column("rs_start_date", DateTime(timezone=True)),
)

Index("ix_rs_work_orders_custom_id", work_orders_table.c.rs_custom_id)
