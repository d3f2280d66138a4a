"""Tiered repository: one fetcher per entity type over a shared request queue."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from f1replay.api_logging import log_api_call
from f1replay.constants import SESSION_POLL_SECONDS
from f1replay.openf1 import AsyncOpenF1Client
from f1replay.openf1.exceptions import OpenF1Error

from .base import ReplayDataRepository
from .cache import CacheClient, MemoryCache
from .errors import F1DataError
from .fetchers import (
    CarDataFetcher,
    DriverFetcher,
    IntervalFetcher,
    LapFetcher,
    LocationFetcher,
    PositionFetcher,
    RadioFetcher,
    TimeWindow,
)
from .mappers import map_sessions
from .request_queue import RequestQueue
from .store import DurableStore
from .types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
    SessionInfo,
    derive_session_status,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TieredRepository(ReplayDataRepository):
    """Durable store → cache → rate-limited API for every entity type.

    All fetchers share one ``AsyncOpenF1Client`` whose transport is the
    ``RequestQueue``, so the rate limit holds across the whole process.
    """

    def __init__(
        self,
        queue: RequestQueue | None = None,
        cache: CacheClient | None = None,
        store: DurableStore | None = None,
        *,
        now: Callable[[], datetime] = _utcnow,
        **fetcher_options: object,
    ) -> None:
        self.queue = queue or RequestQueue()
        self.cache = cache or MemoryCache()
        self.store = store
        self._now = now
        self._client = AsyncOpenF1Client(transport=self.queue)

        self.drivers = DriverFetcher(self._client, self.cache, store)
        self.laps = LapFetcher(self._client, self.cache, store)
        self.positions = PositionFetcher(self._client, self.cache, store)
        self.intervals = IntervalFetcher(self._client, self.cache, store)
        self.radio = RadioFetcher(self._client, self.cache, store)
        self.car_data = CarDataFetcher(self._client, self.cache, store, **fetcher_options)
        self.location = LocationFetcher(self._client, self.cache, store, **fetcher_options)

    @log_api_call
    async def get_sessions(self, year: int) -> list[SessionInfo]:
        """Sessions for a year, newest first, with status derived from their dates."""
        key = f"sessions_{year}"
        rows = None
        try:
            rows = await self.cache.get(key)
        except F1DataError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)

        sessions: list[SessionInfo] | None = None
        if rows is not None:
            try:
                sessions = [SessionInfo.model_validate(r) for r in rows]
            except ValidationError as exc:
                logger.warning("Discarding malformed cached sessions: %s", exc)

        if sessions is None:
            try:
                raw = await self._client.sessions(year=year)
            except OpenF1Error as exc:
                logger.error("Failed to fetch sessions for %s: %s", year, exc)
                return []
            sessions = map_sessions(raw, self._now())
            try:
                await self.cache.set(
                    key,
                    [s.model_dump(mode="json") for s in sessions],
                    int(SESSION_POLL_SECONDS * 1000),
                )
            except F1DataError as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)

        now = self._now()
        unique = {
            s.session_key: s.model_copy(
                update={"status": derive_session_status(s.date_start, s.date_end, now)},
            )
            for s in sessions
        }
        epoch = datetime.min.replace(tzinfo=UTC)
        return sorted(unique.values(), key=lambda s: s.date_start or epoch, reverse=True)

    async def get_active_sessions(self, year: int) -> list[SessionInfo]:
        return [s for s in await self.get_sessions(year) if s.is_live]

    @log_api_call
    async def get_drivers(self, session: SessionInfo) -> list[DriverInfo]:
        drivers = await self.drivers.get(session.session_key, live=session.is_live)
        return sorted(drivers, key=lambda d: d.driver_number)

    @log_api_call
    async def get_laps(self, session: SessionInfo, driver_number: int) -> list[LapTiming]:
        return await self.laps.get(session.session_key, driver_number, live=session.is_live)

    @log_api_call
    async def get_positions(self, session: SessionInfo, driver_number: int) -> list[PositionSample]:
        return await self.positions.get(session.session_key, driver_number, live=session.is_live)

    @log_api_call
    async def get_intervals(self, session: SessionInfo, driver_number: int) -> list[IntervalSample]:
        return await self.intervals.get(session.session_key, driver_number, live=session.is_live)

    @log_api_call
    async def get_team_radio(self, session: SessionInfo, driver_number: int) -> list[RadioMessage]:
        return await self.radio.get(session.session_key, driver_number, live=session.is_live)

    @log_api_call
    async def get_car_data(
        self, session: SessionInfo, driver_number: int, start: datetime,
    ) -> list[CarSample]:
        window = TimeWindow.from_start(start, self.car_data.session_minutes)
        return await self.car_data.get(
            session.session_key, driver_number, live=session.is_live, window=window,
        )

    @log_api_call
    async def get_location(
        self, session: SessionInfo, driver_number: int, start: datetime,
    ) -> list[LocationSample]:
        window = TimeWindow.from_start(start, self.location.session_minutes)
        return await self.location.get(
            session.session_key, driver_number, live=session.is_live, window=window,
        )

    async def close(self) -> None:
        await self._client.close()
        for resource in (self.cache, self.store):
            close = getattr(resource, "close", None)
            if close is not None:
                await close()
