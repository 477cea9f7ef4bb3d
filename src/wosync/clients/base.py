# src/wosync/clients/base.py
"""Base class for HTTP clients that talk to external services."""

from __future__ import annotations

import json
from json import JSONDecodeError
from typing import Any, Self

import httpx


def _parse_json_body(response: httpx.Response) -> tuple[Any, str | None]:
    """Parse a response body as JSON.

    Returns:
        Tuple of (parsed_value, error_message)
        - On success: (parsed value, None)
        - On failure: (None, error_message)
    """
    try:
        return json.loads(response.content), None
    except (JSONDecodeError, UnicodeDecodeError) as e:
        return None, str(e)


class HTTPClientBase:
    """Shared httpx plumbing for outbound clients.

    Holds one pooled httpx.Client per instance so consecutive calls reuse
    TCP connections. Timeouts are configured once here; per-call timeout
    errors surface as httpx.TimeoutException for subclasses to translate.

    Subclasses own their own error taxonomy. This base never raises domain
    errors itself.
    """

    def __init__(
        self,
        *,
        timeout: float,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            base_url: Optional base URL to prepend to relative request paths
            headers: Default headers for all requests
            transport: Optional httpx transport (tests inject MockTransport)
        """
        self._timeout = timeout
        self._base_url = base_url.rstrip("/") if base_url else None
        self._default_headers = headers or {}
        self._client = httpx.Client(
            timeout=timeout,
            headers=self._default_headers,
            follow_redirects=False,
            transport=transport,
        )

    def _resolve_url(self, url: str) -> str:
        """Prepend base_url to relative paths."""
        if self._base_url is None or url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}/{url.lstrip('/')}"

    def close(self) -> None:
        """Close the pooled connections."""
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
