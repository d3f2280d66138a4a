"""Key-value cache tier with per-entry TTL."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from f1replay.constants import CACHE_SERVER_URL, CACHE_TTL_MS, DEFAULT_TIMEOUT

from .errors import CacheError

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


class CacheClient(ABC):
    """Async key-value cache holding opaque JSON values with a TTL in milliseconds."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None if absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_ms: int = CACHE_TTL_MS) -> None: ...

    @abstractmethod
    async def delete(self, key: str) -> None: ...


@dataclass
class CacheEntry:
    """A single cached value and the moment it was written."""

    value: Any
    ttl_ms: int
    written_at_ms: float = field(default_factory=_now_ms)

    def expired(self, now_ms: float) -> bool:
        return now_ms - self.written_at_ms > self.ttl_ms


class MemoryCache(CacheClient):
    """In-process cache. Expired entries are evicted on read."""

    def __init__(
        self,
        max_entries: int = 5000,
        clock_ms: Callable[[], float] = _now_ms,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self.max_entries = max_entries
        self._clock_ms = clock_ms

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock_ms()):
            del self._entries[key]
            return None
        logger.debug("Cache hit: %s", key)
        return entry.value

    async def set(self, key: str, value: Any, ttl_ms: int = CACHE_TTL_MS) -> None:
        self._entries[key] = CacheEntry(value=value, ttl_ms=ttl_ms, written_at_ms=self._clock_ms())
        if len(self._entries) > self.max_entries:
            self._trim()

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def _trim(self) -> None:
        """Drop the oldest 10% of entries."""
        oldest = sorted(self._entries, key=lambda k: self._entries[k].written_at_ms)
        for key in oldest[: max(1, len(oldest) // 10)]:
            del self._entries[key]


class HttpCache(CacheClient):
    """Client for the cache server (``POST /cache``, ``GET|DELETE /cache/{key}``).

    The server enforces the TTL itself and answers ``{"data": null}`` for
    absent or expired keys.
    """

    def __init__(
        self,
        base_url: str = CACHE_SERVER_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def get(self, key: str) -> Any | None:
        try:
            response = await self._client.get(f"/cache/{quote(key, safe='')}")
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CacheError(f"Cache read failed for {key}: {exc}") from exc
        if not isinstance(body, dict):
            raise CacheError(f"Cache read failed for {key}: expected object, got {type(body).__name__}")
        return body.get("data")

    async def set(self, key: str, value: Any, ttl_ms: int = CACHE_TTL_MS) -> None:
        try:
            response = await self._client.post(
                "/cache", json={"key": key, "data": value, "expiresIn": ttl_ms},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CacheError(f"Cache write failed for {key}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            response = await self._client.delete(f"/cache/{quote(key, safe='')}")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CacheError(f"Cache delete failed for {key}: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()
