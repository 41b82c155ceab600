from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.exceptions import RelayError

logger = logging.getLogger(__name__)


class RelayClient:
    """Async HTTP client for the spreadsheet relay."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call(self, action: str, **params: Any) -> Dict[str, Any]:
        if not self.base_url:
            raise RelayError("Falta WEBAPP_URL")

        query = {"action": action, **{k: str(v) for k, v in params.items()}}
        try:
            response = await self.client.get(self.base_url, params=query)
        except httpx.HTTPError as exc:
            logger.error("Relay request %s failed: %s", action, exc)
            raise RelayError(f"WebApp no disponible: {exc}") from exc

        if not response.is_success:
            raise RelayError(f"WebApp respondió {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise RelayError("WebApp devolvió una respuesta no JSON", status_code=response.status_code) from exc
        if not isinstance(data, dict):
            raise RelayError("WebApp devolvió una respuesta inesperada", status_code=response.status_code)

        status = data.get("status")
        if status and status != "success":
            raise RelayError(data.get("message") or "WebApp devolvió error", status_code=response.status_code)
        return data

    async def fetch_range(self, range_a1: str) -> List[List[Any]]:
        data = await self.call("get_api", range=range_a1)
        return data.get("values") or []
