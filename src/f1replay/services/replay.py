"""Replay orchestration: load a session's series and read them at race time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from f1replay.api_logging import log_service_call
from f1replay.constants import LIVE_POLL_SECONDS, TICK_INTERVAL_SECONDS
from f1replay.data.base import ReplayDataRepository
from f1replay.data.types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
    SessionInfo,
)

from .assemblers import (
    GapSnapshot,
    GridEntry,
    RadioInbox,
    TelemetrySnapshot,
    build_grid,
    compute_gap,
    telemetry_at,
)
from .lap_reveal import VisibleLapState, compute_visible_laps
from .polling import LivePoller, PollGroup
from .session_timing import compute_race_end, resolve_session_start
from .timeline import RaceTimeline, TimelineState

logger = logging.getLogger(__name__)


@dataclass
class SessionSeries:
    """Everything loaded for one session, keyed by driver number."""

    laps: dict[int, list[LapTiming]] = field(default_factory=dict)
    positions: dict[int, list[PositionSample]] = field(default_factory=dict)
    intervals: dict[int, list[IntervalSample]] = field(default_factory=dict)
    radio: dict[int, list[RadioMessage]] = field(default_factory=dict)
    car: dict[int, list[CarSample]] = field(default_factory=dict)
    location: dict[int, list[LocationSample]] = field(default_factory=dict)

    def all_laps(self) -> list[LapTiming]:
        return [lap for laps in self.laps.values() for lap in laps]

    def all_radio(self) -> list[RadioMessage]:
        return [m for messages in self.radio.values() for m in messages]


@dataclass(frozen=True)
class ReplaySnapshot:
    race_time: float
    local_time: datetime | None
    state: TimelineState
    speed: float
    gap: GapSnapshot | None
    grid: list[GridEntry]
    telemetry: dict[int, TelemetrySnapshot]
    visible_laps: VisibleLapState
    radio: list[RadioMessage]


class ReplaySession:
    """One selected session: its data, its clock and its live subscriptions.

    ``tracked`` picks the drivers whose laps, gaps, radio and telemetry are
    loaded; positions are loaded for the whole field to build the grid. After
    ``close`` the session is dead and late results from in-flight fetches are
    discarded rather than written into ``series``.
    """

    def __init__(
        self,
        repository: ReplayDataRepository,
        session: SessionInfo,
        tracked: Sequence[int] = (),
        *,
        timeline: RaceTimeline | None = None,
        poll_interval: float = LIVE_POLL_SECONDS,
        load_telemetry: bool = True,
        close_repository: bool = False,
    ) -> None:
        self.repository = repository
        self.session = session
        self.tracked = list(tracked)
        self.live = session.is_live
        self.timeline = timeline or RaceTimeline(session.date_start, live=self.live)
        self.poll_interval = poll_interval
        self.load_telemetry = load_telemetry
        self.series = SessionSeries()
        self.drivers: list[DriverInfo] = []
        self.inbox = RadioInbox()
        self._pollers = PollGroup()
        self._close_repository = close_repository
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def session_start(self) -> datetime | None:
        return self.timeline.session_start

    # ── Loading ──────────────────────────────────────────────────────────────

    @log_service_call
    async def load(self) -> None:
        """Fetch drivers and every series, then anchor the clock.

        Laps go first because they fix the session start that the windowed
        telemetry fetches are measured from.
        """
        drivers = await self.repository.get_drivers(self.session)
        if not self._alive:
            return
        self.drivers = drivers
        if not self.tracked:
            self.tracked = [d.driver_number for d in drivers[:2]]

        await self._gather({f"laps:{n}": self._load_laps(n) for n in self.tracked})
        self._refresh_timing()

        loads = {f"positions:{d.driver_number}": self._load_positions(d.driver_number) for d in drivers}
        for number in self.tracked:
            loads[f"intervals:{number}"] = self._load_intervals(number)
            loads[f"radio:{number}"] = self._load_radio(number)
        if self.load_telemetry and self.session_start is not None:
            for number in self.tracked:
                loads[f"car:{number}"] = self._load_car(number, self.session_start)
                loads[f"location:{number}"] = self._load_location(number, self.session_start)
        await self._gather(loads)

        if self.live and self._alive:
            await self._subscribe_live()

    async def _gather(self, loads: dict[str, Awaitable[None]]) -> None:
        results = await asyncio.gather(*loads.values(), return_exceptions=True)
        for name, result in zip(loads, results):
            if isinstance(result, Exception):
                logger.error("Loading %s for session %s failed: %s",
                             name, self.session.session_key, result)

    async def _load_laps(self, driver_number: int) -> None:
        laps = await self.repository.get_laps(self.session, driver_number)
        self._commit(self.series.laps, driver_number, laps)

    async def _load_positions(self, driver_number: int) -> None:
        positions = await self.repository.get_positions(self.session, driver_number)
        self._commit(self.series.positions, driver_number, positions)

    async def _load_intervals(self, driver_number: int) -> None:
        intervals = await self.repository.get_intervals(self.session, driver_number)
        self._commit(self.series.intervals, driver_number, intervals)

    async def _load_radio(self, driver_number: int) -> None:
        messages = await self.repository.get_team_radio(self.session, driver_number)
        self._commit(self.series.radio, driver_number, messages)

    async def _load_car(self, driver_number: int, start: datetime) -> None:
        samples = await self.repository.get_car_data(self.session, driver_number, start)
        self._commit(self.series.car, driver_number, samples)

    async def _load_location(self, driver_number: int, start: datetime) -> None:
        samples = await self.repository.get_location(self.session, driver_number, start)
        self._commit(self.series.location, driver_number, samples)

    def _commit(self, target: dict[int, list], driver_number: int, samples: list) -> bool:
        if not self._alive:
            logger.debug("Session %s closed, dropping result for #%s",
                         self.session.session_key, driver_number)
            return False
        target[driver_number] = samples
        return True

    def _commit_laps(self, driver_number: int, laps: list[LapTiming]) -> None:
        if self._commit(self.series.laps, driver_number, laps):
            self._refresh_timing()

    def _refresh_timing(self) -> None:
        if not self._alive:
            return
        laps = self.series.all_laps()
        start = resolve_session_start(self.session, laps)
        if start is None:
            return
        self.timeline.set_session_start(start)
        if not self.live:
            self.timeline.set_race_end(compute_race_end(laps, start))

    async def _subscribe_live(self) -> None:
        for number in self.tracked:
            await self._pollers.subscribe(self._poller(
                f"intervals:{number}",
                lambda n=number: self.repository.get_intervals(self.session, n),
                lambda rows, n=number: self._commit(self.series.intervals, n, rows),
            ))
            await self._pollers.subscribe(self._poller(
                f"laps:{number}",
                lambda n=number: self.repository.get_laps(self.session, n),
                lambda rows, n=number: self._commit_laps(n, rows),
            ))
        for driver in self.drivers:
            number = driver.driver_number
            await self._pollers.subscribe(self._poller(
                f"positions:{number}",
                lambda n=number: self.repository.get_positions(self.session, n),
                lambda rows, n=number: self._commit(self.series.positions, n, rows),
            ))

    def _poller(self, name: str, fetch: Callable, commit: Callable) -> LivePoller:
        return LivePoller(
            name, fetch, commit,
            is_alive=lambda: self._alive,
            interval=self.poll_interval,
        )

    # ── Reading ──────────────────────────────────────────────────────────────

    def snapshot(self) -> ReplaySnapshot:
        """Everything the viewer shows at the current ``race_time``."""
        race_time = self.timeline.race_time
        start = self.session_start
        gap = None
        grid: list[GridEntry] = []
        telemetry: dict[int, TelemetrySnapshot] = {}
        radio: list[RadioMessage] = []

        if start is not None:
            if len(self.tracked) >= 2:
                a, b = self.tracked[:2]
                gap = compute_gap(
                    self.series.intervals.get(a, []),
                    self.series.intervals.get(b, []),
                    race_time, start,
                )
            grid = build_grid(self.drivers, self.series.positions, race_time, start, self.series.radio)
            telemetry = {
                n: telemetry_at(
                    n, self.series.car.get(n, []), self.series.location.get(n, []), race_time, start,
                )
                for n in self.tracked
            }
            radio = self.inbox.visible(self.series.all_radio(), race_time, start)

        return ReplaySnapshot(
            race_time=race_time,
            local_time=self.timeline.local_time,
            state=self.timeline.state,
            speed=self.timeline.speed,
            gap=gap,
            grid=grid,
            telemetry=telemetry,
            visible_laps=compute_visible_laps(self.series.all_laps(), race_time, live=self.live),
            radio=radio,
        )

    # ── Playback ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        self.timeline.start()

    def pause(self) -> None:
        self.timeline.pause()

    def resume(self) -> None:
        self.timeline.resume()

    def seek(self, race_time: float) -> None:
        self.timeline.seek(race_time)

    def set_speed(self, speed: float) -> None:
        self.timeline.set_speed(speed)

    def dismiss_radio(self, message: RadioMessage | str) -> None:
        self.inbox.dismiss(message)

    def restart(self) -> None:
        """Rewind to the start of the session, keeping the loaded data."""
        self.timeline.reset(live=self.live)
        self.inbox.clear()
        self._refresh_timing()

    async def run(
        self,
        on_snapshot: Callable[[ReplaySnapshot], object] | None = None,
        interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        """Drive the clock until ``close`` or ``timeline.stop`` is called."""
        def on_tick(_: float) -> None:
            if on_snapshot is not None and self._alive:
                on_snapshot(self.snapshot())

        await self.timeline.run(interval=interval, on_tick=on_tick)

    async def close(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self.timeline.stop()
        await self._pollers.stop_all()
        if self._close_repository:
            await self.repository.close()

    async def __aenter__(self) -> ReplaySession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
