"""Tests for raw-model to internal-sample mapping."""

from __future__ import annotations

import math
from datetime import UTC, datetime

from f1replay.data.mappers import (
    map_car_data,
    map_drivers,
    map_intervals,
    map_laps,
    map_locations,
    map_positions,
    map_sessions,
    map_team_radio,
)
from f1replay.data.types import SessionStatus
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
from tests.conftest import (
    SAMPLE_CAR_DATA,
    SAMPLE_DRIVER,
    SAMPLE_INTERVAL,
    SAMPLE_LAP,
    SAMPLE_LOCATION,
    SAMPLE_POSITION,
    SAMPLE_SESSION,
    SAMPLE_TEAM_RADIO,
)


class TestMapSessions:
    def test_status_from_dates(self):
        rows = [Session.model_validate(SAMPLE_SESSION)]
        during = datetime(2023, 3, 5, 16, 0, tzinfo=UTC)
        after = datetime(2023, 3, 6, tzinfo=UTC)
        assert map_sessions(rows, during)[0].status == SessionStatus.ACTIVE
        assert map_sessions(rows, after)[0].status == SessionStatus.COMPLETED

    def test_missing_key_dropped(self):
        rows = [Session.model_validate({**SAMPLE_SESSION, "session_key": None})]
        assert map_sessions(rows, datetime.now(UTC)) == []

    def test_missing_dates_unknown(self):
        rows = [Session.model_validate({**SAMPLE_SESSION, "date_end": None})]
        assert map_sessions(rows, datetime.now(UTC))[0].status == SessionStatus.UNKNOWN


class TestMapDrivers:
    def test_maps(self):
        drivers = map_drivers([Driver.model_validate(SAMPLE_DRIVER)], 9161)
        assert drivers[0].full_name == "Max VERSTAPPEN"
        assert drivers[0].session_key == 9161

    def test_incomplete_rows_dropped(self):
        rows = [Driver.model_validate({"driver_number": 3}), Driver.model_validate({"full_name": "X"})]
        assert map_drivers(rows, 9161) == []


class TestMapLaps:
    def test_maps_sectors(self):
        lap = map_laps([Lap.model_validate(SAMPLE_LAP)], 9161)[0]
        assert lap.sectors == (31.2, 42.1, 23.6)
        assert lap.lap_time == 96.9
        assert lap.date_start.tzinfo is not None

    def test_lap_without_number_dropped(self):
        assert map_laps([Lap.model_validate({"driver_number": 1})], 9161) == []

    def test_unfinished_sector_kept_as_none(self):
        row = Lap.model_validate({**SAMPLE_LAP, "duration_sector_3": None})
        lap = map_laps([row], 9161)[0]
        assert lap.sectors == (31.2, 42.1, None)


class TestMapSeries:
    def test_positions(self):
        rows = [Position.model_validate(SAMPLE_POSITION), Position.model_validate({"driver_number": 1})]
        samples = map_positions(rows, 9161)
        assert len(samples) == 1
        assert samples[0].position == 1

    def test_intervals_lapped(self):
        rows = [Interval.model_validate({**SAMPLE_INTERVAL, "gap_to_leader": "+1 LAP"})]
        assert math.isnan(map_intervals(rows, 9161)[0].gap_to_leader)

    def test_car_data_defaults(self):
        rows = [CarData.model_validate({**SAMPLE_CAR_DATA, "rpm": None})]
        assert map_car_data(rows, 9161)[0].rpm == 0

    def test_locations_need_coordinates(self):
        rows = [
            Location.model_validate(SAMPLE_LOCATION),
            Location.model_validate({**SAMPLE_LOCATION, "x": None}),
        ]
        assert len(map_locations(rows, 9161)) == 1

    def test_radio_needs_url(self):
        rows = [
            TeamRadio.model_validate(SAMPLE_TEAM_RADIO),
            TeamRadio.model_validate({**SAMPLE_TEAM_RADIO, "recording_url": None}),
        ]
        assert len(map_team_radio(rows, 9161)) == 1
