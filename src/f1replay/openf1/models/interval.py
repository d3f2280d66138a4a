"""Interval (gap) data model."""

from __future__ import annotations

from datetime import datetime

from f1replay.openf1.models._base import ApiModel


class Interval(ApiModel):
    """Gap to leader and to the car ahead (~4 sec updates).

    Lapped cars report strings such as ``"+1 LAP"`` instead of seconds.
    """

    date: datetime | None = None
    driver_number: int | None = None
    gap_to_leader: float | str | None = None
    interval: float | str | None = None
    meeting_key: int | None = None
    session_key: int | None = None
