"""Driver position model."""

from __future__ import annotations

from datetime import datetime

from f1replay.openf1.models._base import ApiModel


class Position(ApiModel):
    """Driver position change during a session."""

    date: datetime | None = None
    driver_number: int | None = None
    meeting_key: int | None = None
    position: int | None = None
    session_key: int | None = None
