"""Session model (practice, qualifying, sprint, race)."""

from __future__ import annotations

from datetime import datetime

from f1replay.openf1.models._base import ApiModel


class Session(ApiModel):
    """F1 session as listed by the ``/sessions`` endpoint."""

    circuit_key: int | None = None
    circuit_short_name: str | None = None
    country_name: str | None = None
    date_end: datetime | None = None
    date_start: datetime | None = None
    location: str | None = None
    meeting_key: int | None = None
    session_key: int | None = None
    session_name: str | None = None
    session_type: str | None = None
    year: int | None = None
