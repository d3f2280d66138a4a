"""Map raw API models into the internal sample shapes.

Rows without a timestamp or driver number cannot be placed on the timeline
and are dropped here, so nothing downstream has to re-check them.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from f1replay.openf1.models import (
    CarData,
    Driver,
    Interval,
    Lap,
    Location,
    Position,
    Session,
    TeamRadio,
)

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


def map_sessions(rows: Iterable[Session], now: datetime) -> list[SessionInfo]:
    result: list[SessionInfo] = []
    for s in rows:
        if s.session_key is None:
            continue
        result.append(SessionInfo(
            session_key=s.session_key,
            session_name=s.session_name or "",
            session_type=s.session_type or "",
            date_start=s.date_start,
            date_end=s.date_end,
            status=derive_session_status(s.date_start, s.date_end, now),
            year=s.year,
            circuit_key=s.circuit_key,
            circuit_short_name=s.circuit_short_name,
        ))
    return result


def map_drivers(rows: Iterable[Driver], session_key: int) -> list[DriverInfo]:
    return [
        DriverInfo(
            driver_number=d.driver_number,
            full_name=d.full_name,
            name_acronym=d.name_acronym or "",
            team_name=d.team_name or "",
            session_key=session_key,
        )
        for d in rows
        if d.driver_number and d.full_name
    ]


def map_laps(rows: Iterable[Lap], session_key: int) -> list[LapTiming]:
    laps = []
    for lap in rows:
        if lap.driver_number is None or lap.lap_number is None:
            continue
        sector_1, sector_2, sector_3 = lap.sector_durations
        laps.append(LapTiming(
            session_key=session_key,
            driver_number=lap.driver_number,
            lap_number=lap.lap_number,
            sector_1=sector_1,
            sector_2=sector_2,
            sector_3=sector_3,
            lap_time=lap.lap_duration,
            date_start=lap.date_start,
        ))
    return laps


def map_positions(rows: Iterable[Position], session_key: int) -> list[PositionSample]:
    return [
        PositionSample(
            session_key=session_key,
            driver_number=p.driver_number,
            date=p.date,
            position=p.position,
        )
        for p in rows
        if p.date is not None and p.driver_number is not None and p.position is not None
    ]


def map_intervals(rows: Iterable[Interval], session_key: int) -> list[IntervalSample]:
    return [
        IntervalSample(
            session_key=session_key,
            driver_number=i.driver_number,
            date=i.date,
            gap_to_leader=i.gap_to_leader,
            interval=i.interval,
        )
        for i in rows
        if i.date is not None and i.driver_number is not None
    ]


def map_car_data(rows: Iterable[CarData], session_key: int) -> list[CarSample]:
    return [
        CarSample(
            session_key=session_key,
            driver_number=c.driver_number,
            date=c.date,
            speed=c.speed or 0,
            rpm=c.rpm or 0,
            n_gear=c.n_gear or 0,
            throttle=c.throttle or 0,
            brake=c.brake or 0,
            drs=c.drs or 0,
        )
        for c in rows
        if c.date is not None and c.driver_number is not None
    ]


def map_locations(rows: Iterable[Location], session_key: int) -> list[LocationSample]:
    return [
        LocationSample(
            session_key=session_key,
            driver_number=loc.driver_number,
            date=loc.date,
            x=loc.x,
            y=loc.y,
            z=loc.z or 0.0,
        )
        for loc in rows
        if (
            loc.date is not None
            and loc.driver_number is not None
            and loc.x is not None
            and loc.y is not None
        )
    ]


def map_team_radio(rows: Iterable[TeamRadio], session_key: int) -> list[RadioMessage]:
    return [
        RadioMessage(
            session_key=session_key,
            driver_number=r.driver_number,
            date=r.date,
            recording_url=r.recording_url,
        )
        for r in rows
        if r.date is not None and r.driver_number is not None and r.recording_url
    ]
