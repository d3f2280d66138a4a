"""Team radio model."""

from __future__ import annotations

from datetime import datetime

from f1replay.openf1.models._base import ApiModel


class TeamRadio(ApiModel):
    """Driver-team radio communication."""

    date: datetime | None = None
    driver_number: int | None = None
    meeting_key: int | None = None
    recording_url: str | None = None
    session_key: int | None = None
