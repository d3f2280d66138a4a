"""Combine per-driver resolved samples into the facts a viewer sees."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from f1replay.data.types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LocationSample,
    PositionSample,
    RadioMessage,
)
from f1replay.formatters import format_gap

from .resolver import resolve_at, sample_offset


# ── Gap ──────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GapSnapshot:
    gap: float
    ahead: int
    behind: int

    @property
    def label(self) -> str:
        return format_gap(self.gap) or ""


def compute_gap(
    intervals_a: Sequence[IntervalSample],
    intervals_b: Sequence[IntervalSample],
    race_time: float,
    session_start: datetime,
) -> GapSnapshot | None:
    """Gap between two drivers from their gap-to-leader at ``race_time``.

    The leader reports no gap to itself, so a missing gap counts as 0.
    Returns None when either driver has no interval yet, or when the
    difference is zero or NaN.
    """
    a = resolve_at(intervals_a, race_time, session_start)
    b = resolve_at(intervals_b, race_time, session_start)
    if a is None or b is None:
        return None
    gap_a = a.gap_to_leader if a.gap_to_leader is not None else 0.0
    gap_b = b.gap_to_leader if b.gap_to_leader is not None else 0.0

    gap = abs(gap_a - gap_b)
    if math.isnan(gap) or gap == 0:
        return None
    if gap_a < gap_b:
        return GapSnapshot(gap=gap, ahead=a.driver_number, behind=b.driver_number)
    return GapSnapshot(gap=gap, ahead=b.driver_number, behind=a.driver_number)


# ── Grid ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GridEntry:
    position: int
    driver: DriverInfo
    radio_count: int = 0


def build_grid(
    drivers: Iterable[DriverInfo],
    positions: Mapping[int, Sequence[PositionSample]],
    race_time: float,
    session_start: datetime,
    radio: Mapping[int, Sequence[RadioMessage]] | None = None,
) -> list[GridEntry]:
    """Running order at ``race_time``; drivers without a position are left out."""
    entries: list[GridEntry] = []
    for driver in drivers:
        sample = resolve_at(positions.get(driver.driver_number, ()), race_time, session_start)
        if sample is None or not sample.position:
            continue
        radio_count = 0
        if radio is not None:
            radio_count = len(due_radio_messages(
                radio.get(driver.driver_number, ()), race_time, session_start,
            ))
        entries.append(GridEntry(position=sample.position, driver=driver, radio_count=radio_count))
    return sorted(entries, key=lambda e: e.position)


# ── Telemetry ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TelemetrySnapshot:
    driver_number: int
    car: CarSample | None = None
    location: LocationSample | None = None

    @property
    def has_data(self) -> bool:
        return self.car is not None or self.location is not None


def telemetry_at(
    driver_number: int,
    car_samples: Sequence[CarSample],
    location_samples: Sequence[LocationSample],
    race_time: float,
    session_start: datetime,
) -> TelemetrySnapshot:
    return TelemetrySnapshot(
        driver_number=driver_number,
        car=resolve_at(car_samples, race_time, session_start),
        location=resolve_at(location_samples, race_time, session_start),
    )


# ── Radio ────────────────────────────────────────────────────────────────────


def due_radio_messages(
    messages: Iterable[RadioMessage],
    race_time: float,
    session_start: datetime,
    dismissed: Iterable[str] = (),
) -> list[RadioMessage]:
    """Messages already played by ``race_time`` and not dismissed, oldest first."""
    dismissed = set(dismissed)
    due = [
        m for m in messages
        if sample_offset(m, session_start) <= race_time and m.message_id not in dismissed
    ]
    return sorted(due, key=lambda m: m.date)


class RadioInbox:
    """Tracks which radio messages the viewer has dismissed during one session."""

    def __init__(self) -> None:
        self._dismissed: set[str] = set()

    def dismiss(self, message: RadioMessage | str) -> None:
        self._dismissed.add(message if isinstance(message, str) else message.message_id)

    def is_dismissed(self, message: RadioMessage) -> bool:
        return message.message_id in self._dismissed

    def visible(
        self,
        messages: Iterable[RadioMessage],
        race_time: float,
        session_start: datetime,
    ) -> list[RadioMessage]:
        return due_radio_messages(messages, race_time, session_start, self._dismissed)

    def clear(self) -> None:
        self._dismissed.clear()
