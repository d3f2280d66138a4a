"""Replay services: clock, point-in-time resolution and orchestration."""

from __future__ import annotations

from .assemblers import (
    GapSnapshot,
    GridEntry,
    RadioInbox,
    TelemetrySnapshot,
    build_grid,
    compute_gap,
    due_radio_messages,
    telemetry_at,
)
from .lap_reveal import (
    ALL_VISIBLE,
    NONE_VISIBLE,
    SectorVisibility,
    VisibleLapState,
    compute_visible_laps,
    sector_completion_times,
    visible_sector_times,
)
from .polling import LivePoller, PollGroup
from .resolver import resolve_at, resolve_many, sample_offset
from .session_timing import (
    compute_race_end,
    derive_session_status,
    infer_session_start,
    resolve_session_start,
)
from .timeline import RaceTimeline, TimelineState
from .replay import ReplaySession, ReplaySnapshot, SessionSeries

__all__ = [
    "ALL_VISIBLE",
    "NONE_VISIBLE",
    "GapSnapshot",
    "GridEntry",
    "LivePoller",
    "PollGroup",
    "RaceTimeline",
    "RadioInbox",
    "ReplaySession",
    "ReplaySnapshot",
    "SectorVisibility",
    "SessionSeries",
    "TelemetrySnapshot",
    "TimelineState",
    "VisibleLapState",
    "build_grid",
    "compute_gap",
    "compute_race_end",
    "compute_visible_laps",
    "derive_session_status",
    "due_radio_messages",
    "infer_session_start",
    "resolve_at",
    "resolve_many",
    "resolve_session_start",
    "sample_offset",
    "sector_completion_times",
    "telemetry_at",
    "visible_sector_times",
]
