"""Abstract repository consumed by the replay services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
    SessionInfo,
)


class ReplayDataRepository(ABC):
    """Source-agnostic access to everything a replay needs.

    Implementations return empty lists for missing or unreachable data
    instead of raising, except where noted.
    """

    @abstractmethod
    async def get_sessions(self, year: int) -> list[SessionInfo]: ...

    @abstractmethod
    async def get_drivers(self, session: SessionInfo) -> list[DriverInfo]: ...

    @abstractmethod
    async def get_laps(self, session: SessionInfo, driver_number: int) -> list[LapTiming]: ...

    @abstractmethod
    async def get_positions(self, session: SessionInfo, driver_number: int) -> list[PositionSample]: ...

    @abstractmethod
    async def get_intervals(self, session: SessionInfo, driver_number: int) -> list[IntervalSample]: ...

    @abstractmethod
    async def get_team_radio(self, session: SessionInfo, driver_number: int) -> list[RadioMessage]: ...

    @abstractmethod
    async def get_car_data(
        self, session: SessionInfo, driver_number: int, start: datetime,
    ) -> list[CarSample]: ...

    @abstractmethod
    async def get_location(
        self, session: SessionInfo, driver_number: int, start: datetime,
    ) -> list[LocationSample]: ...

    async def close(self) -> None:
        """Release network resources. No-op by default."""
