"""Typed async client for the OpenF1 telemetry API."""

from f1replay.openf1._filters import Filter
from f1replay.openf1._http import AsyncTransport, Transport
from f1replay.openf1.client import AsyncOpenF1Client
from f1replay.openf1.exceptions import (
    OpenF1APIError,
    OpenF1ConnectionError,
    OpenF1Error,
    OpenF1TimeoutError,
    OpenF1ValidationError,
    RequestQueueClosedError,
)

__all__ = [
    "AsyncOpenF1Client",
    "AsyncTransport",
    "Filter",
    "OpenF1APIError",
    "OpenF1ConnectionError",
    "OpenF1Error",
    "OpenF1TimeoutError",
    "OpenF1ValidationError",
    "RequestQueueClosedError",
    "Transport",
]
