# src/wosync/clients/upstream.py
"""Client for the authoritative work-order service.

Owns request/response envelope shaping for single work orders:

    GET  {base_url}/WorkOrder/{id}   -> JSON object, or empty body = not found
    PUT  {base_url}/WorkOrder        -> full-record overwrite (not a patch)

Every failure is translated into the engine's error taxonomy here, so
callers never see raw httpx exceptions.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from wosync.clients.base import HTTPClientBase, _parse_json_body
from wosync.contracts import (
    FIELD_ID,
    ConnectionCheck,
    IntegrityViolation,
    UpstreamError,
    WorkOrder,
    WorkOrderNotFound,
    WriteResult,
)
from wosync.core.config import UpstreamSettings

logger = structlog.get_logger(__name__)


class UpstreamClient(HTTPClientBase):
    """Reads and writes single work orders against the upstream service.

    Retains no state between calls apart from the connection pool.

    Example:
        with UpstreamClient(settings.upstream) as client:
            record = client.fetch_work_order(56335)
            record["StatusId"] = 2
            client.write_work_order(record)
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Content-Type": "application/json",
            "Token": settings.token,
        }
        if settings.server_name:
            headers["ServerName"] = settings.server_name
        super().__init__(
            timeout=settings.timeout_seconds,
            base_url=settings.base_url,
            headers=headers,
            transport=transport,
        )

    def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        work_order_id: int | None = None,
        json: WorkOrder | None = None,
    ) -> httpx.Response:
        """Issue one request, mapping transport and HTTP failures to UpstreamError."""
        url = self._resolve_url(path)
        start = time.perf_counter()
        try:
            response = self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.warning(
                "upstream_transport_error",
                operation=operation,
                method=method,
                url=url,
                work_order_id=work_order_id,
                error_type=type(e).__name__,
                error=str(e),
                latency_ms=round(latency_ms, 1),
            )
            raise UpstreamError(
                operation,
                status_code=None,
                body=f"{type(e).__name__}: {e}",
                work_order_id=work_order_id,
            ) from e

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "upstream_response",
            operation=operation,
            method=method,
            url=url,
            work_order_id=work_order_id,
            status_code=response.status_code,
            body_size=len(response.content),
            latency_ms=round(latency_ms, 1),
        )

        if not response.is_success:
            logger.warning(
                "upstream_error_response",
                operation=operation,
                work_order_id=work_order_id,
                status_code=response.status_code,
                body=response.text,
            )
            raise UpstreamError(
                operation,
                status_code=response.status_code,
                body=response.text,
                work_order_id=work_order_id,
            )
        return response

    def fetch_work_order(self, work_order_id: int) -> WorkOrder:
        """Read the current upstream record.

        Raises:
            WorkOrderNotFound: Upstream answered 2xx with an empty (or null) body
            IntegrityViolation: The returned record carries a different Id
            UpstreamError: Non-2xx status, transport failure, or non-object body
        """
        response = self._send("GET", f"WorkOrder/{work_order_id}", operation="read", work_order_id=work_order_id)

        # Empty body is the upstream's way of saying "no such work order"
        if not response.content.strip():
            logger.info("work_order_not_found", work_order_id=work_order_id)
            raise WorkOrderNotFound(work_order_id)

        record, error = _parse_json_body(response)
        if error is not None:
            raise UpstreamError(
                "read",
                status_code=response.status_code,
                body=f"Response is not valid JSON ({error}): {response.text[:200]}",
                work_order_id=work_order_id,
            )
        if record is None:
            logger.info("work_order_not_found", work_order_id=work_order_id)
            raise WorkOrderNotFound(work_order_id)
        if not isinstance(record, dict):
            raise UpstreamError(
                "read",
                status_code=response.status_code,
                body=f"Expected a JSON object, got {type(record).__name__}",
                work_order_id=work_order_id,
            )

        returned_id = record.get(FIELD_ID)
        if isinstance(returned_id, bool) or returned_id != work_order_id:
            logger.error("work_order_id_mismatch", requested_id=work_order_id, returned_id=returned_id)
            raise IntegrityViolation(work_order_id, returned_id)

        return record

    def write_work_order(self, envelope: WorkOrder) -> WriteResult:
        """Overwrite the full upstream record with ``envelope``.

        Raises:
            UpstreamError: Non-2xx status or transport failure
        """
        work_order_id = envelope.get(FIELD_ID)
        response = self._send("PUT", "WorkOrder", operation="write", work_order_id=work_order_id, json=envelope)

        body: Any = None
        if response.content.strip():
            parsed, error = _parse_json_body(response)
            if error is None:
                body = parsed
        logger.info("work_order_written", work_order_id=work_order_id, status_code=response.status_code)
        return WriteResult(status_code=response.status_code, body=body)

    def get_settings(self, endpoint: str) -> Any:
        """Read a ``Settings/{endpoint}`` resource (e.g. ``Statuses``).

        Returns:
            Parsed JSON, or None for an empty or non-JSON body
        """
        response = self._send("GET", f"Settings/{endpoint}", operation="settings")
        if not response.content.strip():
            return None
        parsed, error = _parse_json_body(response)
        if error is not None:
            logger.warning("settings_response_not_json", endpoint=endpoint, error=error)
            return None
        return parsed

    def test_connection(self) -> ConnectionCheck:
        """Probe the upstream with a cheap authenticated read. Never raises."""
        try:
            self._send("GET", "Settings/CompanyInfo", operation="settings")
        except UpstreamError as e:
            return ConnectionCheck(success=False, message=f"Connection failed: {e} ({e.hint})")
        return ConnectionCheck(success=True, message="Connection successful")
