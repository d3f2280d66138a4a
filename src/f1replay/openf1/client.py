"""Async client for the telemetry source API."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter

from f1replay.constants import DEFAULT_TIMEOUT, OPENF1_BASE_URL
from f1replay.openf1._filters import build_query_params
from f1replay.openf1._http import AsyncTransport, Transport
from f1replay.openf1.exceptions import OpenF1ValidationError
from f1replay.openf1.models import (
    CarData,
    Driver,
    Interval,
    Lap,
    Location,
    Position,
    Session,
    TeamRadio,
)

T = TypeVar("T")


def _validate_list(model_type: type[T], data: list[dict[str, Any]]) -> list[T]:
    """Validate a list of dicts against a Pydantic model."""
    try:
        adapter = TypeAdapter(list[model_type])
        return adapter.validate_python(data)
    except Exception as exc:
        raise OpenF1ValidationError(
            f"Failed to validate {model_type.__name__} response: {exc}"
        ) from exc


class AsyncOpenF1Client:
    """Asynchronous client for the telemetry source.

    Every call goes through ``transport``. Pass a ``RequestQueue`` there to
    make the client share the process-wide rate limit.

    Usage:
        async with AsyncOpenF1Client(transport=queue) as f1:
            laps = await f1.laps(session_key=9161, driver_number=1)
    """

    def __init__(
        self,
        base_url: str = OPENF1_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Transport | None = None,
    ) -> None:
        self._transport = transport or AsyncTransport(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> AsyncOpenF1Client:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def _get(self, endpoint: str, model: type[T], **kwargs: Any) -> list[T]:
        params = build_query_params(**kwargs)
        data = await self._transport.get(endpoint, params)
        return _validate_list(model, data)

    # ── Endpoints ──────────────────────────────────────────────

    async def car_data(self, **kwargs: Any) -> list[CarData]:
        """Get car telemetry data (speed, throttle, brake, RPM, gear, DRS)."""
        return await self._get("/car_data", CarData, **kwargs)

    async def drivers(self, **kwargs: Any) -> list[Driver]:
        """Get driver information for a session."""
        return await self._get("/drivers", Driver, **kwargs)

    async def intervals(self, **kwargs: Any) -> list[Interval]:
        """Get gap-to-leader and interval samples."""
        return await self._get("/intervals", Interval, **kwargs)

    async def laps(self, **kwargs: Any) -> list[Lap]:
        """Get lap data with sector durations."""
        return await self._get("/laps", Lap, **kwargs)

    async def location(self, **kwargs: Any) -> list[Location]:
        """Get car positions on track (3D coordinates)."""
        return await self._get("/location", Location, **kwargs)

    async def position(self, **kwargs: Any) -> list[Position]:
        """Get driver position changes throughout a session."""
        return await self._get("/position", Position, **kwargs)

    async def sessions(self, **kwargs: Any) -> list[Session]:
        """Get session information (practice, qualifying, sprint, race)."""
        return await self._get("/sessions", Session, **kwargs)

    async def team_radio(self, **kwargs: Any) -> list[TeamRadio]:
        """Get driver-team radio communications."""
        return await self._get("/team_radio", TeamRadio, **kwargs)
