"""Session-level timing facts: status, true start and race-end bound.

Status derivation lives beside ``SessionStatus`` in ``f1replay.data.types``
and is re-exported here.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

from f1replay.constants import START_REFERENCE_LAP
from f1replay.data.types import LapTiming, SessionInfo, derive_session_status

__all__ = [
    "compute_race_end",
    "derive_session_status",
    "infer_session_start",
    "resolve_session_start",
]


def infer_session_start(laps: Iterable[LapTiming]) -> datetime | None:
    """Back-compute the real start from the first usable lap-2 record.

    The nominal schedule is usually off by the broadcast delay, so the start
    is taken as ``lap2.date_start - (sector_2 + sector_3)``. Returns None when
    no lap-2 record carries a start time and both sector durations.
    """
    candidates = sorted(
        (
            lap for lap in laps
            if lap.lap_number == START_REFERENCE_LAP and lap.date_start is not None
        ),
        key=lambda lap: lap.date_start,
    )
    for lap in candidates:
        if lap.sector_2 and lap.sector_3:
            return lap.date_start - timedelta(seconds=lap.sector_2 + lap.sector_3)
    return None


def resolve_session_start(session: SessionInfo, laps: Iterable[LapTiming]) -> datetime | None:
    """Inferred start once lap data exists, the nominal date until then."""
    return infer_session_start(laps) or session.date_start


def compute_race_end(laps: Iterable[LapTiming], session_start: datetime) -> float:
    """Seconds from ``session_start`` until the last driver finishes.

    For each driver the last lap with a start time contributes its start
    offset plus its summed sector durations; the maximum over drivers wins.
    Returns 0.0 when no lap has a start time.
    """
    last_laps: dict[int, LapTiming] = {}
    for lap in laps:
        if lap.date_start is None:
            continue
        current = last_laps.get(lap.driver_number)
        if current is None or lap.lap_number > current.lap_number:
            last_laps[lap.driver_number] = lap

    finishes = [
        (lap.date_start - session_start).total_seconds() + lap.total_duration
        for lap in last_laps.values()
    ]
    return max(finishes, default=0.0)
