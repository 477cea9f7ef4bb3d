# tests/unit/clients/test_mirror_sync.py
"""Tests for MirrorSyncTrigger: best-effort, never raises."""

import httpx
import pytest
import respx

from tests.fixtures.factories import SYNC_URL
from wosync.clients import MirrorSyncTrigger
from wosync.contracts import MirrorSyncMethod
from wosync.core.config import MirrorSyncSettings


@respx.mock
def test_get_success() -> None:
    route = respx.get(SYNC_URL).mock(return_value=httpx.Response(200, json={"ok": True}))

    with MirrorSyncTrigger(MirrorSyncSettings(url=SYNC_URL)) as trigger:
        result = trigger.trigger_sync()

    assert route.called
    assert result.success is True
    assert result.status_code == 200
    assert result.message == "Data sync webhook triggered successfully"
    assert result.triggered_at.tzinfo is not None


@respx.mock
def test_post_method() -> None:
    route = respx.post(SYNC_URL).mock(return_value=httpx.Response(202))

    with MirrorSyncTrigger(MirrorSyncSettings(url=SYNC_URL, method=MirrorSyncMethod.POST)) as trigger:
        result = trigger.trigger_sync()

    assert route.call_count == 1
    assert result.success is True


@respx.mock
def test_non_2xx_is_soft_failure() -> None:
    respx.get(SYNC_URL).mock(return_value=httpx.Response(502, text="Bad Gateway"))

    with MirrorSyncTrigger(MirrorSyncSettings(url=SYNC_URL)) as trigger:
        result = trigger.trigger_sync()

    assert result.success is False
    assert result.status_code == 502
    assert "502" in result.message


@respx.mock
@pytest.mark.parametrize("error", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")])
def test_transport_error_is_soft_failure(error: httpx.HTTPError) -> None:
    respx.get(SYNC_URL).mock(side_effect=error)

    with MirrorSyncTrigger(MirrorSyncSettings(url=SYNC_URL)) as trigger:
        result = trigger.trigger_sync()

    assert result.success is False
    assert result.status_code is None
    assert type(error).__name__ in result.message


def test_not_configured_makes_no_call() -> None:
    with respx.mock(assert_all_mocked=True) as mock:
        with MirrorSyncTrigger(MirrorSyncSettings()) as trigger:
            assert trigger.enabled is False
            result = trigger.trigger_sync()

        assert mock.calls.call_count == 0

    assert result.success is False
    assert result.message == "mirror sync not configured"
