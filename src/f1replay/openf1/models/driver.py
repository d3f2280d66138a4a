"""Driver information model."""

from __future__ import annotations

from f1replay.openf1.models._base import ApiModel


class Driver(ApiModel):
    """Driver info for a specific session."""

    broadcast_name: str | None = None
    driver_number: int | None = None
    full_name: str | None = None
    meeting_key: int | None = None
    name_acronym: str | None = None
    session_key: int | None = None
    team_colour: str | None = None
    team_name: str | None = None
