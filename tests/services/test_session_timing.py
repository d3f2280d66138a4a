"""Tests for session status, start inference and race-end computation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from f1replay.data.types import SessionStatus
from f1replay.data.types import derive_session_status as types_derive_session_status
from f1replay.services.session_timing import (
    compute_race_end,
    derive_session_status,
    infer_session_start,
    resolve_session_start,
)
from tests.conftest import SESSION_START, at, make_lap, make_session

END = SESSION_START + timedelta(hours=2)


class TestDeriveSessionStatus:
    def test_reexported_from_data_types(self):
        assert derive_session_status is types_derive_session_status
        assert derive_session_status(SESSION_START, END, END) == SessionStatus.ACTIVE


class TestInferSessionStart:
    def test_back_computes_from_lap_two(self):
        lap2_start = at(200)
        laps = [make_lap(1, 2, 40, 5, 6, date_start=lap2_start)]
        assert infer_session_start(laps) == lap2_start - timedelta(seconds=11)

    def test_earliest_usable_lap_two_wins(self):
        laps = [
            make_lap(44, 2, 40, 5, 6, date_start=at(205)),
            make_lap(1, 2, 40, 5, 6, date_start=at(200)),
        ]
        assert infer_session_start(laps) == at(189)

    def test_lap_two_without_sectors_skipped(self):
        laps = [
            make_lap(1, 2, 40, None, 6, date_start=at(200)),
            make_lap(44, 2, 40, 5, 6, date_start=at(201)),
        ]
        assert infer_session_start(laps) == at(190)

    def test_no_usable_lap(self):
        assert infer_session_start([make_lap(1, 1, date_start=at(0))]) is None
        assert infer_session_start([]) is None

    def test_resolve_falls_back_to_schedule(self):
        session = make_session()
        assert resolve_session_start(session, []) == session.date_start
        laps = [make_lap(1, 2, 40, 5, 6, date_start=at(200))]
        assert resolve_session_start(session, laps) == at(189)


class TestComputeRaceEnd:
    def test_latest_finisher(self):
        laps = [
            make_lap(1, 1, date_start=at(0)),
            make_lap(1, 2, date_start=at(90)),
            make_lap(44, 1, date_start=at(1)),
            make_lap(44, 2, 31, 31, 31, date_start=at(92)),
        ]
        assert compute_race_end(laps, SESSION_START) == pytest.approx(185)

    def test_no_laps(self):
        assert compute_race_end([], SESSION_START) == 0.0
        assert compute_race_end([make_lap(1, 1)], SESSION_START) == 0.0
