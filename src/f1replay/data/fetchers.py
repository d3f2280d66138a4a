"""Tiered data fetchers: durable store, then cache, then the rate-limited API.

Every fetcher returns internal sample models and never raises past ``get``:
a tier that fails is logged and skipped, and total failure yields ``[]`` so a
single broken series degrades only its own panel.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from f1replay.constants import (
    CACHE_TTL_MS,
    CAR_DATA_RETRY_DELAY,
    CHUNK_MAX_RETRIES,
    CHUNK_MINUTES,
    DRIVER_CACHE_TTL_MS,
    ESTIMATED_SESSION_MINUTES,
    LOCATION_RETRY_DELAY,
)
from f1replay.openf1 import AsyncOpenF1Client, Filter
from f1replay.openf1.exceptions import OpenF1Error, RequestQueueClosedError

from .cache import CacheClient
from .errors import ChunkFetchError, F1DataError
from .mappers import (
    map_car_data,
    map_drivers,
    map_intervals,
    map_laps,
    map_locations,
    map_positions,
    map_team_radio,
)
from .store import DurableStore
from .types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S", bound=BaseModel)

_FETCH_ERRORS = (OpenF1Error, F1DataError)


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def split(self, minutes: int) -> list[TimeWindow]:
        """Partition into consecutive fixed-size windows covering [start, end)."""
        step = timedelta(minutes=minutes)
        windows: list[TimeWindow] = []
        cursor = self.start
        while cursor < self.end:
            windows.append(TimeWindow(cursor, min(cursor + step, self.end)))
            cursor += step
        return windows

    @classmethod
    def from_start(cls, start: datetime, minutes: int = ESTIMATED_SESSION_MINUTES) -> TimeWindow:
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        return cls(start, start + timedelta(minutes=minutes))


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Tagged result of a bounded retry loop: success carries a value, exhaustion an error."""

    value: T | None
    attempts: int
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def retry_with_delay(
    operation: Callable[[], Awaitable[T]],
    *,
    retries: int,
    delay: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "",
) -> RetryOutcome[T]:
    """Run ``operation`` up to ``retries + 1`` times with a fixed delay between attempts."""
    error: BaseException | None = None
    attempts = 0
    for attempt in range(retries + 1):
        attempts = attempt + 1
        try:
            return RetryOutcome(value=await operation(), attempts=attempts)
        except RequestQueueClosedError as exc:
            error = exc
            break
        except _FETCH_ERRORS as exc:
            error = exc
            if attempt < retries:
                logger.warning(
                    "Attempt %d/%d for %s failed: %s; retrying in %.1fs",
                    attempts, retries + 1, label, exc, delay,
                )
                await sleep(delay)
    return RetryOutcome(value=None, attempts=attempts, error=error)


class TieredFetcher(Generic[S]):
    """Durable store → cache → queued live fetch, with cache write-back.

    Subclasses set ``entity`` (cache key prefix), ``store_resource`` (durable
    endpoint, or None when the store does not hold this type) and
    ``sample_type``, and implement ``_fetch_live``.
    """

    entity: ClassVar[str]
    store_resource: ClassVar[str | None] = None
    sample_type: ClassVar[type[BaseModel]]

    def __init__(
        self,
        client: AsyncOpenF1Client,
        cache: CacheClient,
        store: DurableStore | None = None,
        *,
        ttl_ms: int = CACHE_TTL_MS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._store = store
        self.ttl_ms = ttl_ms
        self._adapter: TypeAdapter[list[Any]] = TypeAdapter(list[self.sample_type])

    def cache_key(self, session_key: int, driver_number: int | None = None) -> str:
        key = f"{self.entity}_{session_key}"
        return key if driver_number is None else f"{key}_{driver_number}"

    async def get(
        self,
        session_key: int,
        driver_number: int | None = None,
        *,
        live: bool = False,
        window: TimeWindow | None = None,
    ) -> list[S]:
        """Return the series for one driver (or the whole session), never raising."""
        stored = await self._from_store(session_key, driver_number)
        if stored:
            return stored

        key = self.cache_key(session_key, driver_number)
        # A live session's cache would only ever hold an older partial series.
        if not live:
            cached = await self._read_cache(key)
            if cached is not None:
                return cached

        try:
            samples = await self._fetch_live(session_key, driver_number, live=live, window=window)
        except _FETCH_ERRORS as exc:
            logger.error(
                "All tiers failed for %s (session %s, driver %s): %s",
                self.entity, session_key, driver_number, exc,
            )
            return []

        if samples and not live:
            await self._write_cache(key, samples)
        return samples

    async def _fetch_live(
        self,
        session_key: int,
        driver_number: int | None,
        *,
        live: bool,
        window: TimeWindow | None,
    ) -> list[S]:
        raise NotImplementedError

    # ── Tier helpers ─────────────────────────────────────────────────────────

    def _parse(self, rows: Any) -> list[S] | None:
        try:
            return self._adapter.validate_python(rows)
        except ValidationError as exc:
            logger.warning("Discarding malformed %s rows: %s", self.entity, exc)
            return None

    async def _from_store(
        self,
        session_key: int,
        driver_number: int | None,
        window: TimeWindow | None = None,
        resource: str | None = None,
    ) -> list[S]:
        resource = resource or self.store_resource
        if self._store is None or resource is None:
            return []
        try:
            rows = await self._store.fetch(
                resource,
                session_key,
                driver_number,
                start=window.start if window else None,
                end=window.end if window else None,
            )
        except F1DataError as exc:
            logger.warning("Durable store failed for %s, trying cache: %s", self.entity, exc)
            return []
        return self._parse(rows) or []

    async def _read_cache(self, key: str) -> list[S] | None:
        try:
            cached = await self._cache.get(key)
        except F1DataError as exc:
            logger.warning("Cache read failed for %s, fetching live: %s", key, exc)
            return None
        if cached is None:
            logger.debug("Cache miss: %s", key)
            return None
        return self._parse(cached)

    async def _write_cache(self, key: str, samples: list[S]) -> None:
        try:
            await self._cache.set(
                key, [s.model_dump(mode="json") for s in samples], self.ttl_ms,
            )
        except F1DataError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)


# ── Whole-series fetchers ────────────────────────────────────────────────────


class DriverFetcher(TieredFetcher[DriverInfo]):
    entity = "drivers"
    store_resource = "drivers"
    sample_type = DriverInfo

    def __init__(self, *args: Any, ttl_ms: int = DRIVER_CACHE_TTL_MS, **kwargs: Any) -> None:
        super().__init__(*args, ttl_ms=ttl_ms, **kwargs)

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        rows = await self._client.drivers(session_key=session_key)
        return map_drivers(rows, session_key)


class LapFetcher(TieredFetcher[LapTiming]):
    entity = "laps"
    store_resource = "timing"
    sample_type = LapTiming

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        rows = await self._client.laps(session_key=session_key, driver_number=driver_number)
        return map_laps(rows, session_key)


class PositionFetcher(TieredFetcher[PositionSample]):
    entity = "positions"
    store_resource = "position"
    sample_type = PositionSample

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        rows = await self._client.position(session_key=session_key, driver_number=driver_number)
        return map_positions(rows, session_key)


class IntervalFetcher(TieredFetcher[IntervalSample]):
    entity = "intervals"
    store_resource = "intervals"
    sample_type = IntervalSample

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        rows = await self._client.intervals(session_key=session_key, driver_number=driver_number)
        return map_intervals(rows, session_key)


class RadioFetcher(TieredFetcher[RadioMessage]):
    entity = "radio"
    store_resource = "radio"
    sample_type = RadioMessage

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        rows = await self._client.team_radio(session_key=session_key, driver_number=driver_number)
        return map_team_radio(rows, session_key)


# ── Chunked fetchers for high-volume series ──────────────────────────────────


class ChunkedFetcher(TieredFetcher[S]):
    """Fetch a session's series in sequential fixed windows.

    Windows are fetched one after another (never in parallel) so the request
    queue sees one outstanding call per series. Each window has its own cache
    entry and a bounded retry loop. The walk stops at the first window that
    comes back empty, which marks the end of the recorded data.
    """

    default_retry_delay: ClassVar[float] = 1.0
    # Ask the durable store per window instead of for the whole series.
    store_per_window: ClassVar[bool] = False

    def __init__(
        self,
        client: AsyncOpenF1Client,
        cache: CacheClient,
        store: DurableStore | None = None,
        *,
        ttl_ms: int = CACHE_TTL_MS,
        chunk_minutes: int = CHUNK_MINUTES,
        session_minutes: int = ESTIMATED_SESSION_MINUTES,
        max_retries: int = CHUNK_MAX_RETRIES,
        retry_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(client, cache, store, ttl_ms=ttl_ms)
        self.chunk_minutes = chunk_minutes
        self.session_minutes = session_minutes
        self.max_retries = max_retries
        self.retry_delay = self.default_retry_delay if retry_delay is None else retry_delay
        self._sleep = sleep

    def chunk_key(self, session_key: int, driver_number: int | None, start: datetime) -> str:
        return f"{self.cache_key(session_key, driver_number)}_{start.isoformat()}"

    async def _from_store(self, session_key, driver_number, window=None, resource=None):
        if self.store_per_window and window is None:
            return []
        return await super()._from_store(session_key, driver_number, window, resource)

    async def _fetch_live(self, session_key, driver_number, *, live, window):
        if window is None:
            logger.warning(
                "No session start for %s (session %s, driver %s); nothing to fetch",
                self.entity, session_key, driver_number,
            )
            return []

        samples: list[S] = []
        for chunk in window.split(self.chunk_minutes):
            key = self.chunk_key(session_key, driver_number, chunk.start)
            if not live:
                cached = await self._read_cache(key)
                if cached is not None:
                    samples.extend(cached)
                    continue

            outcome = await retry_with_delay(
                lambda chunk=chunk: self._fetch_window(session_key, driver_number, chunk),
                retries=self.max_retries,
                delay=self.retry_delay,
                sleep=self._sleep,
                label=key,
            )
            if not outcome.ok:
                logger.error("Giving up on %s after %d attempts", key, outcome.attempts)
                raise ChunkFetchError(key, outcome.attempts, outcome.error)

            chunk_samples = outcome.value or []
            if not chunk_samples:
                logger.debug("Empty window %s; recorded data ends here", key)
                break
            if not live:
                await self._write_cache(key, chunk_samples)
            samples.extend(chunk_samples)
        return samples

    async def _fetch_window(
        self, session_key: int, driver_number: int | None, window: TimeWindow,
    ) -> list[S]:
        if self.store_per_window:
            stored = await self._from_store(session_key, driver_number, window)
            if stored:
                return stored
        return await self._fetch_api_window(session_key, driver_number, window)

    async def _fetch_api_window(
        self, session_key: int, driver_number: int | None, window: TimeWindow,
    ) -> list[S]:
        raise NotImplementedError


class CarDataFetcher(ChunkedFetcher[CarSample]):
    entity = "car_data"
    sample_type = CarSample
    default_retry_delay = CAR_DATA_RETRY_DELAY

    async def _fetch_api_window(self, session_key, driver_number, window):
        rows = await self._client.car_data(
            session_key=session_key,
            driver_number=driver_number,
            date=Filter(gt=window.start, lt=window.end),
        )
        return map_car_data(rows, session_key)


class LocationFetcher(ChunkedFetcher[LocationSample]):
    entity = "location"
    store_resource = "location"
    sample_type = LocationSample
    default_retry_delay = LOCATION_RETRY_DELAY
    store_per_window = True

    async def _fetch_api_window(self, session_key, driver_number, window):
        rows = await self._client.location(
            session_key=session_key,
            driver_number=driver_number,
            date=Filter(gt=window.start, lt=window.end),
        )
        return map_locations(rows, session_key)
