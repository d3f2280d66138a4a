"""Low-level async HTTP transport wrapping httpx."""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from f1replay.constants import DEFAULT_TIMEOUT, OPENF1_BASE_URL
from f1replay.openf1.exceptions import (
    OpenF1APIError,
    OpenF1ConnectionError,
    OpenF1TimeoutError,
)

QueryParams = list[tuple[str, str]]


class Transport(Protocol):
    """Anything that can GET an endpoint and return the decoded JSON array."""

    async def get(self, endpoint: str, params: QueryParams) -> list[dict[str, Any]]: ...

    async def close(self) -> None: ...


def _handle_response(response: httpx.Response) -> list[dict[str, Any]]:
    """Validate response status and return parsed JSON."""
    if response.status_code >= 400:
        raise OpenF1APIError(
            status_code=response.status_code,
            message=response.text,
        )
    data = response.json()
    # Some endpoints answer an empty filter with an object instead of an array.
    if not isinstance(data, list):
        return []
    return data


class AsyncTransport:
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str = OPENF1_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def get(self, endpoint: str, params: QueryParams) -> list[dict[str, Any]]:
        """Perform an async GET request and return parsed JSON."""
        try:
            response = await self._client.get(endpoint, params=params)
        except httpx.ConnectError as exc:
            raise OpenF1ConnectionError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise OpenF1TimeoutError(str(exc)) from exc
        return _handle_response(response)

    async def close(self) -> None:
        await self._client.aclose()
