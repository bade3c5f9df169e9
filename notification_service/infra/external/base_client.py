"""Base HTTP client for external service integrations.

Provides:
- Connection pooling
- Timeout configuration
- Request/response logging
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class BaseHTTPClient:
    """Thin async HTTP client with pooled connections.

    Errors are not retried here; callers classify them (the dispatch
    pipeline turns transport failures into a requeue).

    Example:
        class PreferenceServiceClient(BaseHTTPClient):
            async def preferences(self, user_id: str) -> httpx.Response:
                return await self.get(f"/v1/users/{user_id}/preferences")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers=headers or {},
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        await self.client.aclose()

    async def __aenter__(self) -> BaseHTTPClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make a GET request and return the raw response.

        Raises:
            httpx.TransportError: On connection failures and timeouts.
        """
        response = await self.client.get(path, params=params, **kwargs)
        logger.debug(
            "GET %s%s -> %s",
            self.base_url,
            path,
            response.status_code,
            extra={"path": path, "status_code": response.status_code},
        )
        return response
