# src/wosync/clients/mirror_sync.py
"""One-shot notification asking the reconciliation pipeline to refresh the mirror.

Mirror freshness is an optimization, not a correctness requirement: every
failure here is logged and returned as ``MirrorSyncResult(success=False)``,
never raised to the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
import structlog

from wosync.clients.base import HTTPClientBase
from wosync.contracts import MirrorSyncFailure, MirrorSyncResult
from wosync.core.config import MirrorSyncSettings

logger = structlog.get_logger(__name__)


class MirrorSyncTrigger(HTTPClientBase):
    """Fires the mirror refresh webhook. Idempotent and best-effort."""

    def __init__(
        self,
        settings: MirrorSyncSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(
            timeout=settings.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._url = settings.url
        self._method = settings.method.value

    @property
    def enabled(self) -> bool:
        return self._url is not None

    def _notify(self) -> int:
        """Send the notification.

        Returns:
            HTTP status code of a successful response

        Raises:
            MirrorSyncFailure: On non-2xx or transport failure
        """
        assert self._url is not None
        try:
            response = self._client.request(self._method, self._url)
        except httpx.HTTPError as e:
            raise MirrorSyncFailure(f"Failed to trigger mirror sync: {type(e).__name__}: {e}") from e
        if not response.is_success:
            raise MirrorSyncFailure(
                f"Mirror sync webhook returned status {response.status_code}",
                status_code=response.status_code,
            )
        return response.status_code

    def trigger_sync(self) -> MirrorSyncResult:
        """Notify the reconciliation pipeline. Never raises."""
        triggered_at = datetime.now(UTC)
        if not self.enabled:
            logger.info("mirror_sync_skipped", reason="not configured")
            return MirrorSyncResult(success=False, message="mirror sync not configured", triggered_at=triggered_at)

        try:
            status_code = self._notify()
        except MirrorSyncFailure as e:
            logger.warning("mirror_sync_failed", error=str(e))
            return MirrorSyncResult(
                success=False,
                message=str(e),
                triggered_at=triggered_at,
                status_code=e.status_code,
            )

        logger.info("mirror_sync_triggered", status_code=status_code)
        return MirrorSyncResult(
            success=True,
            message="Data sync webhook triggered successfully",
            triggered_at=triggered_at,
            status_code=status_code,
        )
