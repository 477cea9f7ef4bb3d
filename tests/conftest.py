# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Iterator

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from tests.fixtures.factories import SYNC_URL, UPSTREAM_BASE, seed_mirror
from wosync.core.config import (
    BatchSettings,
    MirrorSettings,
    MirrorSyncSettings,
    ReassignmentSettings,
    UpstreamSettings,
    WorkOrderSyncSettings,
)
from wosync.core.mirror import MirrorDB

settings.register_profile("ci", max_examples=100, suppress_health_check=[HealthCheck.too_slow])
settings.register_profile("nightly", max_examples=1000)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def sync_settings() -> WorkOrderSyncSettings:
    """Settings pointing at mocked endpoints, with no batch delay."""
    return WorkOrderSyncSettings(
        upstream=UpstreamSettings(base_url=UPSTREAM_BASE, token="test-token", server_name="acme"),
        mirror=MirrorSettings(url="sqlite:///:memory:"),
        reassignment=ReassignmentSettings(fallback_field_worker_id=1),
        mirror_sync=MirrorSyncSettings(url=SYNC_URL),
        batch=BatchSettings(delay_seconds=0.0),
    )


@pytest.fixture
def mirror_db() -> Iterator[MirrorDB]:
    """In-memory mirror seeded with field workers {1, 7, 12} and a status catalog."""
    db = MirrorDB.in_memory()
    seed_mirror(db)
    yield db
    db.close()
