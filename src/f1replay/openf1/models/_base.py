"""Shared base for raw API payload models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps and convert offset-aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ApiModel(BaseModel):
    """Frozen model tolerant of extra and missing fields in API rows."""

    model_config = ConfigDict(frozen=True, extra="ignore")
