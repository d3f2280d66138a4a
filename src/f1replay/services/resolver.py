"""Point-in-time resolution over timestamped series."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence
from datetime import datetime
from typing import TypeVar

from f1replay.data.types import TimedSample

S = TypeVar("S", bound=TimedSample)


def sample_offset(sample: TimedSample, session_start: datetime) -> float:
    """Seconds between ``session_start`` and the sample's timestamp."""
    return (sample.date - session_start).total_seconds()


def resolve_at(
    samples: Sequence[S],
    race_time: float,
    session_start: datetime,
) -> S | None:
    """Return the last sample at or before ``race_time`` (hold-previous-value).

    Offsets are measured from ``session_start``. When ``race_time`` precedes
    every sample, the earliest sample is returned; an empty series gives None.
    Source order is irrelevant: the series is sorted by timestamp first, and
    among equal timestamps the last one in source order wins.
    """
    if not samples:
        return None
    ordered = sorted(samples, key=lambda s: s.date)
    offsets = [sample_offset(s, session_start) for s in ordered]
    index = bisect_right(offsets, race_time)
    if index == 0:
        return ordered[0]
    return ordered[index - 1]


def resolve_many(
    series: dict[int, Sequence[S]],
    race_time: float,
    session_start: datetime,
) -> dict[int, S]:
    """Resolve one series per driver, leaving out drivers with no samples."""
    resolved: dict[int, S] = {}
    for driver_number, samples in series.items():
        sample = resolve_at(samples, race_time, session_start)
        if sample is not None:
            resolved[driver_number] = sample
    return resolved
