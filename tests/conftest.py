"""Shared test fixtures, sample API responses and in-memory fakes."""

from __future__ import annotations

import asyncio
import os
import tempfile
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

# Keep the call log out of the working tree during tests.
os.environ.setdefault("F1REPLAY_LOG_DIR", tempfile.mkdtemp(prefix="f1replay-logs-"))

from f1replay.data.base import ReplayDataRepository  # noqa: E402
from f1replay.data.types import (  # noqa: E402
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
    SessionInfo,
    SessionStatus,
)
from f1replay.openf1.exceptions import OpenF1APIError  # noqa: E402

BASE_URL = "https://api.openf1.org/v1"
SESSION_KEY = 9161
SESSION_START = datetime(2023, 3, 5, 15, 0, tzinfo=UTC)


SAMPLE_SESSION = {
    "circuit_key": 63,
    "circuit_short_name": "Sakhir",
    "country_name": "Bahrain",
    "date_end": "2023-03-05T17:00:00",
    "date_start": "2023-03-05T15:00:00",
    "gmt_offset": "03:00:00",
    "location": "Sakhir",
    "meeting_key": 1141,
    "session_key": 9161,
    "session_name": "Race",
    "session_type": "Race",
    "year": 2023,
}

SAMPLE_DRIVER = {
    "broadcast_name": "M VERSTAPPEN",
    "country_code": "NED",
    "driver_number": 1,
    "first_name": "Max",
    "full_name": "Max VERSTAPPEN",
    "last_name": "Verstappen",
    "meeting_key": 1141,
    "name_acronym": "VER",
    "session_key": 9161,
    "team_colour": "3671C6",
    "team_name": "Red Bull Racing",
}

SAMPLE_LAP = {
    "date_start": "2023-03-05T15:03:40",
    "driver_number": 1,
    "duration_sector_1": 31.2,
    "duration_sector_2": 42.1,
    "duration_sector_3": 23.6,
    "is_pit_out_lap": False,
    "lap_duration": 96.9,
    "lap_number": 2,
    "meeting_key": 1141,
    "segments_sector_1": [2049, 2049, 2051],
    "session_key": 9161,
}

SAMPLE_POSITION = {
    "date": "2023-03-05T15:05:00.123000+00:00",
    "driver_number": 1,
    "meeting_key": 1141,
    "position": 1,
    "session_key": 9161,
}

SAMPLE_INTERVAL = {
    "date": "2023-03-05T15:05:04.500000+00:00",
    "driver_number": 11,
    "gap_to_leader": 2.481,
    "interval": 0.912,
    "meeting_key": 1141,
    "session_key": 9161,
}

SAMPLE_CAR_DATA = {
    "brake": 0,
    "date": "2023-03-05T15:10:00.100000+00:00",
    "driver_number": 1,
    "drs": 12,
    "meeting_key": 1141,
    "n_gear": 7,
    "rpm": 10500,
    "session_key": 9161,
    "speed": 305,
    "throttle": 100,
}

SAMPLE_LOCATION = {
    "date": "2023-03-05T15:10:00.300000+00:00",
    "driver_number": 1,
    "meeting_key": 1141,
    "session_key": 9161,
    "x": 567,
    "y": 3195,
    "z": 187,
}

SAMPLE_TEAM_RADIO = {
    "date": "2023-03-05T15:12:31.000000+00:00",
    "driver_number": 1,
    "meeting_key": 1141,
    "recording_url": "https://livetiming.formula1.com/static/2023/radio/MAXVER01_1_20230305_151231.mp3",
    "session_key": 9161,
}


# ── Sample builders ──────────────────────────────────────────────────────────


def at(seconds: float) -> datetime:
    """Wall-clock time ``seconds`` after SESSION_START."""
    return SESSION_START + timedelta(seconds=seconds)


def make_session(
    status: SessionStatus = SessionStatus.COMPLETED,
    session_key: int = SESSION_KEY,
    date_start: datetime | None = SESSION_START,
) -> SessionInfo:
    return SessionInfo(
        session_key=session_key,
        session_name="Race",
        session_type="Race",
        date_start=date_start,
        date_end=date_start + timedelta(hours=2) if date_start else None,
        status=status,
        year=2023,
    )


def make_driver(number: int, name: str = "", team: str = "") -> DriverInfo:
    return DriverInfo(
        driver_number=number,
        full_name=name or f"Driver {number}",
        name_acronym=f"D{number:02d}",
        team_name=team,
        session_key=SESSION_KEY,
    )


def make_lap(
    driver_number: int,
    lap_number: int,
    s1: float | None = 30.0,
    s2: float | None = 30.0,
    s3: float | None = 30.0,
    date_start: datetime | None = None,
) -> LapTiming:
    return LapTiming(
        session_key=SESSION_KEY,
        driver_number=driver_number,
        lap_number=lap_number,
        sector_1=s1,
        sector_2=s2,
        sector_3=s3,
        lap_time=sum(s for s in (s1, s2, s3) if s is not None) or None,
        date_start=date_start,
    )


def make_position(driver_number: int, seconds: float, position: int) -> PositionSample:
    return PositionSample(
        session_key=SESSION_KEY, driver_number=driver_number, date=at(seconds), position=position,
    )


def make_interval(driver_number: int, seconds: float, gap: float | str | None) -> IntervalSample:
    return IntervalSample(
        session_key=SESSION_KEY, driver_number=driver_number, date=at(seconds),
        gap_to_leader=gap, interval=None,
    )


def make_car(driver_number: int, seconds: float, speed: int = 300) -> CarSample:
    return CarSample(
        session_key=SESSION_KEY, driver_number=driver_number, date=at(seconds), speed=speed,
    )


def make_location(driver_number: int, seconds: float, x: float = 0.0) -> LocationSample:
    return LocationSample(
        session_key=SESSION_KEY, driver_number=driver_number, date=at(seconds), x=x, y=0.0,
    )


def make_radio(driver_number: int, seconds: float) -> RadioMessage:
    return RadioMessage(
        session_key=SESSION_KEY,
        driver_number=driver_number,
        date=at(seconds),
        recording_url=f"https://example.com/{driver_number}_{int(seconds)}.mp3",
    )


# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeClock:
    """Manual clock; ``sleep`` advances it instead of waiting."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class FakeTransport:
    """Scripted transport recording every GET.

    ``responses`` maps endpoint to a list of rows or to an exception. A
    callable value is called with the params and its result used instead.
    """

    def __init__(
        self,
        responses: dict[str, Any] | None = None,
        clock: FakeClock | None = None,
    ) -> None:
        self.responses = responses or {}
        self.clock = clock
        self.calls: list[tuple[str, list[tuple[str, str]]]] = []
        self.call_times: list[float] = []
        self.closed = False

    async def get(self, endpoint: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        self.calls.append((endpoint, list(params)))
        if self.clock is not None:
            self.call_times.append(self.clock())
        response = self.responses.get(endpoint, [])
        if callable(response):
            response = response(params)
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True

    def endpoints(self) -> list[str]:
        return [endpoint for endpoint, _ in self.calls]


def api_error(status: int = 500) -> OpenF1APIError:
    return OpenF1APIError(status_code=status, message="boom")


class FakeRepository(ReplayDataRepository):
    """In-memory repository returning canned series per driver."""

    def __init__(
        self,
        drivers: list[DriverInfo] | None = None,
        laps: dict[int, list[LapTiming]] | None = None,
        positions: dict[int, list[PositionSample]] | None = None,
        intervals: dict[int, list[IntervalSample]] | None = None,
        radio: dict[int, list[RadioMessage]] | None = None,
        car: dict[int, list[CarSample]] | None = None,
        location: dict[int, list[LocationSample]] | None = None,
    ) -> None:
        self.drivers = drivers or []
        self.laps = laps or {}
        self.positions = positions or {}
        self.intervals = intervals or {}
        self.radio = radio or {}
        self.car = car or {}
        self.location = location or {}
        self.calls: list[tuple[str, int | None]] = []
        self.telemetry_starts: list[datetime] = []
        self.closed = False

    async def get_sessions(self, year: int) -> list[SessionInfo]:
        return [make_session()]

    async def get_drivers(self, session: SessionInfo) -> list[DriverInfo]:
        self.calls.append(("drivers", None))
        return list(self.drivers)

    async def get_laps(self, session: SessionInfo, driver_number: int) -> list[LapTiming]:
        self.calls.append(("laps", driver_number))
        return list(self.laps.get(driver_number, []))

    async def get_positions(self, session: SessionInfo, driver_number: int) -> list[PositionSample]:
        self.calls.append(("positions", driver_number))
        return list(self.positions.get(driver_number, []))

    async def get_intervals(self, session: SessionInfo, driver_number: int) -> list[IntervalSample]:
        self.calls.append(("intervals", driver_number))
        return list(self.intervals.get(driver_number, []))

    async def get_team_radio(self, session: SessionInfo, driver_number: int) -> list[RadioMessage]:
        self.calls.append(("radio", driver_number))
        return list(self.radio.get(driver_number, []))

    async def get_car_data(self, session: SessionInfo, driver_number: int, start: datetime) -> list[CarSample]:
        self.calls.append(("car", driver_number))
        self.telemetry_starts.append(start)
        return list(self.car.get(driver_number, []))

    async def get_location(
        self, session: SessionInfo, driver_number: int, start: datetime,
    ) -> list[LocationSample]:
        self.calls.append(("location", driver_number))
        self.telemetry_starts.append(start)
        return list(self.location.get(driver_number, []))

    async def close(self) -> None:
        self.closed = True


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session() -> SessionInfo:
    return make_session()


@pytest.fixture
def live_session() -> SessionInfo:
    return make_session(status=SessionStatus.ACTIVE)
