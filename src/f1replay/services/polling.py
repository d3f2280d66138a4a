"""Interval polling of live series, one subscription per named series."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from f1replay.constants import LIVE_POLL_SECONDS
from f1replay.data.errors import F1DataError
from f1replay.openf1.exceptions import OpenF1Error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LivePoller(Generic[T]):
    """Re-run ``fetch`` every ``interval`` seconds and hand results to ``commit``.

    The loop ends as soon as ``is_alive`` turns false, and results that
    arrive after that are dropped instead of committed.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        commit: Callable[[T], None],
        *,
        is_alive: Callable[[], bool],
        interval: float = LIVE_POLL_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._commit = commit
        self._is_alive = is_alive
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self.polls = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        if not self.running:
            self._task = asyncio.create_task(self._run(), name=f"poll:{self.name}")
        return self._task  # type: ignore[return-value]

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while self._is_alive():
            await self._sleep(self.interval)
            if not self._is_alive():
                break
            try:
                result = await self._fetch()
            except (OpenF1Error, F1DataError) as exc:
                logger.warning("Poll %s failed: %s", self.name, exc)
                continue
            except Exception:
                logger.exception("Poll %s raised unexpectedly", self.name)
                continue
            self.polls += 1
            if not self._is_alive():
                logger.debug("Discarding %s result after teardown", self.name)
                break
            self._commit(result)


class PollGroup:
    """Named set of pollers; subscribing a name twice replaces the old poller."""

    def __init__(self) -> None:
        self._pollers: dict[str, LivePoller] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._pollers

    def __len__(self) -> int:
        return len(self._pollers)

    async def subscribe(self, poller: LivePoller) -> None:
        previous = self._pollers.pop(poller.name, None)
        if previous is not None:
            await previous.stop()
        self._pollers[poller.name] = poller
        poller.start()

    async def stop_all(self) -> None:
        pollers, self._pollers = list(self._pollers.values()), {}
        for poller in pollers:
            await poller.stop()
