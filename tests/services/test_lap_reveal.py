"""Tests for progressive lap and sector reveal."""

from __future__ import annotations

from f1replay.services.lap_reveal import (
    ALL_VISIBLE,
    NONE_VISIBLE,
    SectorVisibility,
    compute_visible_laps,
    sector_completion_times,
    visible_sector_times,
)
from tests.conftest import make_lap


def _two_laps():
    return [make_lap(1, 1, 30, 30, 30), make_lap(1, 2, 31, 29, 30)]


class TestSectorCompletionTimes:
    def test_cumulative_across_laps(self):
        times = sector_completion_times(_two_laps())
        assert times[(1, 1)] == (30, 60, 90)
        assert times[(2, 1)] == (121, 150, 180)

    def test_lap_order_taken_from_lap_number(self):
        times = sector_completion_times(_two_laps()[::-1])
        assert times[(2, 1)] == (121, 150, 180)

    def test_missing_sector_has_no_time_and_adds_nothing(self):
        laps = [make_lap(1, 1, 30, None, 30), make_lap(1, 2, 30, 30, 30)]
        times = sector_completion_times(laps)
        assert times[(1, 1)] == (30, None, 60)
        assert times[(2, 1)] == (90, 120, 150)

    def test_drivers_independent(self):
        laps = [make_lap(1, 1, 30, 30, 30), make_lap(44, 1, 40, 40, 40)]
        times = sector_completion_times(laps)
        assert times[(1, 1)][2] == 90
        assert times[(1, 44)][2] == 120


class TestComputeVisibleLaps:
    def test_mid_lap_scenario(self):
        state = compute_visible_laps(_two_laps(), 95)
        assert state[1][1] == ALL_VISIBLE
        assert state[2][1] == NONE_VISIBLE

    def test_partial_lap(self):
        state = compute_visible_laps(_two_laps(), 150)
        assert state[2][1] == SectorVisibility(True, True, False)
        assert not state[2][1].complete

    def test_boundary_is_inclusive(self):
        assert compute_visible_laps(_two_laps(), 30)[1][1].sector_1
        assert not compute_visible_laps(_two_laps(), 29.999)[1][1].sector_1

    def test_missing_sector_never_visible(self):
        laps = [make_lap(1, 1, 30, None, 30)]
        state = compute_visible_laps(laps, 10_000)
        assert state[1][1] == SectorVisibility(True, False, True)

    def test_monotonic_in_race_time(self):
        laps = _two_laps() + [make_lap(44, 1, 29, 33, 28), make_lap(44, 2, 30, None, 31)]
        previous = compute_visible_laps(laps, 0)
        for t in range(1, 200, 3):
            current = compute_visible_laps(laps, t)
            for lap_number, drivers in previous.items():
                for driver, vis in drivers.items():
                    now = current[lap_number][driver].as_tuple()
                    assert all(n or not p for p, n in zip(vis.as_tuple(), now))
            previous = current

    def test_recompute_after_seek_back(self):
        laps = _two_laps()
        compute_visible_laps(laps, 180)
        assert compute_visible_laps(laps, 95)[2][1] == NONE_VISIBLE

    def test_live_shows_everything(self):
        state = compute_visible_laps(_two_laps(), 0, live=True)
        assert state[1][1] == ALL_VISIBLE
        assert state[2][1] == ALL_VISIBLE


class TestVisibleSectorTimes:
    def test_blanks_hidden(self):
        lap = make_lap(1, 2, 31, 29, 30)
        assert visible_sector_times(lap, SectorVisibility(True, False, False)) == (31, None, None)
