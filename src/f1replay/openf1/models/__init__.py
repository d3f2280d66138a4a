"""Raw telemetry source payload models."""

from f1replay.openf1.models._base import ApiModel, as_utc
from f1replay.openf1.models.car_data import CarData
from f1replay.openf1.models.driver import Driver
from f1replay.openf1.models.interval import Interval
from f1replay.openf1.models.lap import Lap
from f1replay.openf1.models.location import Location
from f1replay.openf1.models.position import Position
from f1replay.openf1.models.session import Session
from f1replay.openf1.models.team_radio import TeamRadio

__all__ = [
    "ApiModel",
    "CarData",
    "Driver",
    "Interval",
    "Lap",
    "Location",
    "Position",
    "Session",
    "TeamRadio",
    "as_utc",
]
