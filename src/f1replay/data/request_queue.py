"""Rate-limited request queue: the single serialization point for outbound API calls."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from f1replay.constants import (
    MAX_REQUESTS_PER_SECOND,
    MIN_REQUEST_SPACING_SECONDS,
    RATE_WINDOW_SECONDS,
)
from f1replay.openf1._http import AsyncTransport, QueryParams, Transport
from f1replay.openf1.exceptions import RequestQueueClosedError

logger = logging.getLogger(__name__)


@dataclass
class _QueuedRequest:
    endpoint: str
    params: QueryParams
    future: asyncio.Future[list[dict[str, Any]]]


class RequestQueue:
    """FIFO queue that throttles dispatches to the wrapped transport.

    Two limits apply to every dispatch: at most ``max_per_window`` requests in
    any rolling ``window`` seconds, and at least ``min_spacing`` seconds since
    the previous dispatch. One drain task runs at a time; ``enqueue`` may be
    called concurrently from any number of coroutines. A failed request rejects
    only its own future. Identical requests are not merged.

    The queue implements the transport interface, so handing it to
    ``AsyncOpenF1Client(transport=queue)`` routes every client call through it.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        max_per_window: int = MAX_REQUESTS_PER_SECOND,
        window: float = RATE_WINDOW_SECONDS,
        min_spacing: float = MIN_REQUEST_SPACING_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport or AsyncTransport()
        self.max_per_window = max_per_window
        self.window = window
        self.min_spacing = min_spacing
        self._clock = clock
        self._sleep = sleep
        self._pending: deque[_QueuedRequest] = deque()
        self._dispatched: deque[float] = deque()
        self._drain_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def enqueue(self, endpoint: str, params: QueryParams) -> list[dict[str, Any]]:
        """Queue a GET and wait for its decoded JSON array."""
        if self._closed:
            raise RequestQueueClosedError(f"Queue closed; dropped {endpoint}")
        future: asyncio.Future[list[dict[str, Any]]] = asyncio.get_running_loop().create_future()
        self._pending.append(_QueuedRequest(endpoint, list(params), future))
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.create_task(self._drain())
        return await future

    async def get(self, endpoint: str, params: QueryParams) -> list[dict[str, Any]]:
        return await self.enqueue(endpoint, params)

    async def close(self) -> None:
        """Stop draining, fail anything still queued and close the transport."""
        self._closed = True
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        while self._pending:
            request = self._pending.popleft()
            if not request.future.done():
                request.future.set_exception(
                    RequestQueueClosedError(f"Queue closed; dropped {request.endpoint}"),
                )
        await self._transport.close()

    async def _drain(self) -> None:
        while self._pending:
            await self._wait_for_slot()
            request = self._pending.popleft()
            if request.future.done():
                # Caller went away while queued.
                continue
            self._dispatched.append(self._clock())
            try:
                result = await self._transport.get(request.endpoint, request.params)
            except asyncio.CancelledError:
                if not request.future.done():
                    request.future.set_exception(
                        RequestQueueClosedError(f"Queue closed; dropped {request.endpoint}"),
                    )
                raise
            except Exception as exc:
                logger.warning("Request %s failed: %s", request.endpoint, exc)
                if not request.future.done():
                    request.future.set_exception(exc)
                continue
            if not request.future.done():
                request.future.set_result(result)

    async def _wait_for_slot(self) -> None:
        """Suspend until both the rolling-window cap and the spacing allow a dispatch."""
        while True:
            now = self._clock()
            while self._dispatched and now - self._dispatched[0] >= self.window:
                self._dispatched.popleft()

            delay = 0.0
            if len(self._dispatched) >= self.max_per_window:
                delay = self._dispatched[0] + self.window - now
            if self._dispatched:
                delay = max(delay, self._dispatched[-1] + self.min_spacing - now)
            if delay <= 0:
                return
            logger.debug("Throttling for %.3fs (%d queued)", delay, len(self._pending))
            await self._sleep(delay)
