"""Read-only client for the durable store's thin query endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from f1replay.constants import DEFAULT_TIMEOUT, DURABLE_STORE_URL
from f1replay.openf1._filters import format_param

from .errors import StoreError


class DurableStore:
    """Rows already shaped like the internal samples, keyed by session/driver.

    Endpoints look like ``/{resource}/{session_key}[/{driver_number}]`` with
    optional ``start``/``end`` query values for windowed resources. A 404 or
    an empty array both mean "not stored".
    """

    def __init__(
        self,
        base_url: str = DURABLE_STORE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def fetch(
        self,
        resource: str,
        session_key: int,
        driver_number: int | None = None,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[dict[str, Any]]:
        path = f"/{resource}/{session_key}"
        if driver_number is not None:
            path += f"/{driver_number}"
        params = {
            key: format_param(value)
            for key, value in (("start", start), ("end", end))
            if value is not None
        }
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise StoreError(f"Durable store unreachable for {path}: {exc}") from exc
        if response.status_code == 404:
            return []
        if response.status_code >= 400:
            raise StoreError(f"Durable store HTTP {response.status_code} for {path}")
        try:
            data = response.json()
        except ValueError as exc:
            raise StoreError(f"Durable store sent invalid JSON for {path}") from exc
        return data if isinstance(data, list) else []

    async def close(self) -> None:
        await self._client.aclose()
