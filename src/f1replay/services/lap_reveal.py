"""Progressive reveal of lap and sector times during historical replay.

A sector's time only becomes visible once the simulated clock reaches the
moment that sector was really completed: the sum of every earlier sector
duration for that driver (all prior laps, then prior sectors of this lap)
plus the sector's own duration. Visibility is recomputed from scratch for
each (laps, race_time) pair, which keeps it correct under seek, speed
changes and pause, and makes it monotonic in ``race_time``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from f1replay.data.types import LapTiming


@dataclass(frozen=True)
class SectorVisibility:
    sector_1: bool = False
    sector_2: bool = False
    sector_3: bool = False

    @property
    def complete(self) -> bool:
        return self.sector_1 and self.sector_2 and self.sector_3

    def as_tuple(self) -> tuple[bool, bool, bool]:
        return (self.sector_1, self.sector_2, self.sector_3)


ALL_VISIBLE = SectorVisibility(True, True, True)
NONE_VISIBLE = SectorVisibility()

# lap number -> driver number -> visibility
VisibleLapState = dict[int, dict[int, SectorVisibility]]


def sector_completion_times(laps: Iterable[LapTiming]) -> dict[tuple[int, int], tuple[float | None, ...]]:
    """Cumulative completion time of every sector, keyed by (lap, driver).

    A missing sector has no completion time (None) and adds nothing to the
    running total of later sectors.
    """
    by_driver: dict[int, list[LapTiming]] = defaultdict(list)
    for lap in laps:
        by_driver[lap.driver_number].append(lap)

    completions: dict[tuple[int, int], tuple[float | None, ...]] = {}
    for driver_number, driver_laps in by_driver.items():
        elapsed = 0.0
        for lap in sorted(driver_laps, key=lambda l: l.lap_number):
            times: list[float | None] = []
            for duration in lap.sectors:
                if duration is None:
                    times.append(None)
                    continue
                elapsed += duration
                times.append(elapsed)
            completions[(lap.lap_number, driver_number)] = tuple(times)
    return completions


def compute_visible_laps(
    laps: Iterable[LapTiming],
    race_time: float,
    *,
    live: bool = False,
) -> VisibleLapState:
    """Which sectors of which laps should be shown at ``race_time``.

    Live sessions have nothing to spoil, so every known sector is shown.
    """
    laps = list(laps)
    state: VisibleLapState = defaultdict(dict)
    if live:
        for lap in laps:
            state[lap.lap_number][lap.driver_number] = ALL_VISIBLE
        return dict(state)

    for (lap_number, driver_number), times in sector_completion_times(laps).items():
        state[lap_number][driver_number] = SectorVisibility(
            *(t is not None and race_time >= t for t in times)
        )
    return dict(state)


def visible_sector_times(
    lap: LapTiming, visibility: SectorVisibility,
) -> tuple[float | None, float | None, float | None]:
    """The lap's sector durations with unrevealed ones blanked out."""
    return tuple(  # type: ignore[return-value]
        duration if shown else None
        for duration, shown in zip(lap.sectors, visibility.as_tuple())
    )
