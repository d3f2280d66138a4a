"""Internal data contracts shared by fetchers, resolver and assemblers."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from f1replay.openf1.models import as_utc


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    UNKNOWN = "unknown"


def derive_session_status(
    date_start: datetime | None,
    date_end: datetime | None,
    now: datetime,
) -> SessionStatus:
    """Classify a session by comparing ``now`` to its scheduled bounds."""
    if date_start is None or date_end is None:
        return SessionStatus.UNKNOWN
    if now > date_end:
        return SessionStatus.COMPLETED
    if date_start <= now <= date_end:
        return SessionStatus.ACTIVE
    return SessionStatus.SCHEDULED


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SessionInfo(_Frozen):
    session_key: int
    session_name: str = ""
    session_type: str = ""
    date_start: datetime | None = None
    date_end: datetime | None = None
    status: SessionStatus = SessionStatus.UNKNOWN
    year: int | None = None
    circuit_key: int | None = None
    circuit_short_name: str | None = None

    @field_validator("date_start", "date_end")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @property
    def is_live(self) -> bool:
        return self.status == SessionStatus.ACTIVE


class DriverInfo(_Frozen):
    driver_number: int
    full_name: str
    name_acronym: str = ""
    team_name: str = ""
    session_key: int | None = None


class TimedSample(_Frozen):
    """Any sample stamped with a wall-clock time for one driver in one session."""

    session_key: int
    driver_number: int
    date: datetime

    @field_validator("date")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)  # type: ignore[return-value]


class PositionSample(TimedSample):
    position: int


class IntervalSample(TimedSample):
    gap_to_leader: float | None = None
    interval: float | None = None

    @field_validator("gap_to_leader", "interval", mode="before")
    @classmethod
    def _seconds_or_nan(cls, value: object) -> float | None:
        # "+1 LAP" style values have no meaningful numeric gap.
        if value is None:
            return None
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return math.nan
        return value  # type: ignore[return-value]


class CarSample(TimedSample):
    speed: int = 0
    rpm: int = 0
    n_gear: int = 0
    throttle: int = 0
    brake: int = 0
    drs: int = 0


class LocationSample(TimedSample):
    x: float
    y: float
    z: float = 0.0


class RadioMessage(TimedSample):
    recording_url: str

    @property
    def message_id(self) -> str:
        """Composite dismissal key: timestamp plus driver number."""
        return f"{self.date.isoformat()}_{self.driver_number}"


class LapTiming(_Frozen):
    session_key: int
    driver_number: int
    lap_number: int
    sector_1: float | None = None
    sector_2: float | None = None
    sector_3: float | None = None
    lap_time: float | None = None
    date_start: datetime | None = None

    @field_validator("date_start")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @property
    def sectors(self) -> tuple[float | None, float | None, float | None]:
        return (self.sector_1, self.sector_2, self.sector_3)

    @property
    def total_duration(self) -> float:
        """Sum of the sectors that are present."""
        return sum(s for s in self.sectors if s is not None)
