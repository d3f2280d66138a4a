"""Lap timing model."""

from __future__ import annotations

from datetime import datetime

from f1replay.openf1.models._base import ApiModel


class Lap(ApiModel):
    """Individual lap with sector durations."""

    date_start: datetime | None = None
    driver_number: int | None = None
    duration_sector_1: float | None = None
    duration_sector_2: float | None = None
    duration_sector_3: float | None = None
    lap_duration: float | None = None
    lap_number: int | None = None
    meeting_key: int | None = None
    session_key: int | None = None

    @property
    def sector_durations(self) -> tuple[float | None, float | None, float | None]:
        return (self.duration_sector_1, self.duration_sector_2, self.duration_sector_3)
