"""Virtual race clock driving replay and live tracking."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from enum import Enum

from f1replay.constants import MAX_SPEED, MIN_SPEED, TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class TimelineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RaceTimeline:
    """Owns ``race_time`` (seconds since the session start) and its playback state.

    Only ``tick`` advances time. UI actions (pause, resume, seek, speed) only
    set values that the next tick reads, so a single timer is the one mutation
    path for the running clock.

    Replay sessions advance by the real elapsed time since the last tick times
    ``speed`` and stop at ``race_end``. Live sessions follow the wall clock's
    offset from the session start and ignore ``speed``.
    """

    def __init__(
        self,
        session_start: datetime | None = None,
        *,
        live: bool = False,
        race_end: float | None = None,
        min_speed: float = MIN_SPEED,
        max_speed: float = MAX_SPEED,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_start = session_start
        self.live = live
        self.min_speed = min_speed
        self.max_speed = max_speed
        self._clock = clock
        self._now = now
        self.race_end: float | None = race_end or None
        self.state = TimelineState.IDLE
        self.race_time = 0.0
        self.speed = 1.0
        self._last_tick = clock()
        self._stopped = False

    # ── Derived values ───────────────────────────────────────────────────────

    @property
    def is_paused(self) -> bool:
        return self.state != TimelineState.RUNNING

    @property
    def local_time(self) -> datetime | None:
        if self.session_start is None:
            return None
        return self.session_start + timedelta(seconds=self.race_time)

    # ── Actions ──────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Begin the simulation from zero, or resume it if already started."""
        if self.state != TimelineState.IDLE:
            self.resume()
            return
        self.race_time = 0.0
        self.speed = 1.0
        self._last_tick = self._clock()
        self.state = TimelineState.RUNNING
        logger.debug("Timeline started (live=%s, end=%s)", self.live, self.race_end)

    def pause(self) -> None:
        if self.state == TimelineState.RUNNING:
            self.state = TimelineState.PAUSED

    def resume(self) -> None:
        if self.state == TimelineState.IDLE:
            self.start()
            return
        if self.state == TimelineState.COMPLETED and self._at_end():
            return
        if self.state in (TimelineState.PAUSED, TimelineState.COMPLETED):
            # Drop the time spent paused so the next tick has a small delta.
            self._last_tick = self._clock()
            self.state = TimelineState.RUNNING

    def set_paused(self, paused: bool) -> None:
        if paused:
            self.pause()
        else:
            self.resume()

    def set_speed(self, speed: float) -> None:
        self.speed = min(max(speed, self.min_speed), self.max_speed)

    def seek(self, race_time: float) -> None:
        """Jump to ``race_time``; legal in any state and keeps the pause state."""
        self.race_time = self._clamp(race_time)
        if self.state == TimelineState.COMPLETED and not self._at_end():
            self.state = TimelineState.PAUSED

    def set_race_end(self, race_end: float | None) -> None:
        self.race_end = race_end or None
        self.race_time = self._clamp(self.race_time)

    def set_session_start(self, session_start: datetime) -> None:
        """Re-anchor the clock, e.g. once the true start has been inferred."""
        self.session_start = session_start

    def reset(self, session_start: datetime | None = None, *, live: bool | None = None) -> None:
        """Return to idle, as when a different session is selected."""
        if session_start is not None:
            self.session_start = session_start
        if live is not None:
            self.live = live
        self.race_end = None
        self.race_time = 0.0
        self.speed = 1.0
        self.state = TimelineState.IDLE
        self._last_tick = self._clock()

    # ── Clock ────────────────────────────────────────────────────────────────

    def tick(self) -> float:
        """Advance the clock once and return the new ``race_time``."""
        now = self._clock()
        delta = now - self._last_tick
        self._last_tick = now
        if self.state != TimelineState.RUNNING:
            return self.race_time

        if self.live and self.session_start is not None:
            self.race_time = max(0.0, (self._now() - self.session_start).total_seconds())
            return self.race_time

        self.race_time = self._clamp(self.race_time + delta * self.speed)
        if self._at_end():
            logger.info("Reached race end at %.1fs", self.race_time)
            self.state = TimelineState.COMPLETED
        return self.race_time

    async def run(
        self,
        interval: float = TICK_INTERVAL_SECONDS,
        on_tick: Callable[[float], object] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Tick every ``interval`` seconds until ``stop`` is called."""
        self._stopped = False
        while not self._stopped:
            await sleep(interval)
            if self._stopped:
                break
            race_time = self.tick()
            if on_tick is not None:
                on_tick(race_time)

    def stop(self) -> None:
        self._stopped = True

    def _clamp(self, race_time: float) -> float:
        race_time = max(0.0, race_time)
        if self.race_end is not None and not self.live:
            race_time = min(race_time, self.race_end)
        return race_time

    def _at_end(self) -> bool:
        return not self.live and self.race_end is not None and self.race_time >= self.race_end
