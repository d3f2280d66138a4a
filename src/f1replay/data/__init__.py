"""Data layer: collaborator clients, tiered fetchers and the repository."""

from __future__ import annotations

from .errors import CacheError, ChunkFetchError, F1DataError, StoreError
from .types import (
    CarSample,
    DriverInfo,
    IntervalSample,
    LapTiming,
    LocationSample,
    PositionSample,
    RadioMessage,
    SessionInfo,
    SessionStatus,
    TimedSample,
)
from .cache import CacheClient, CacheEntry, HttpCache, MemoryCache
from .store import DurableStore
from .request_queue import RequestQueue
from .base import ReplayDataRepository
from .fetchers import RetryOutcome, TimeWindow, retry_with_delay
from .repository import TieredRepository

__all__ = [
    "CacheClient",
    "CacheEntry",
    "CacheError",
    "CarSample",
    "ChunkFetchError",
    "DriverInfo",
    "DurableStore",
    "F1DataError",
    "HttpCache",
    "IntervalSample",
    "LapTiming",
    "LocationSample",
    "MemoryCache",
    "PositionSample",
    "RadioMessage",
    "ReplayDataRepository",
    "RequestQueue",
    "RetryOutcome",
    "SessionInfo",
    "SessionStatus",
    "StoreError",
    "TieredRepository",
    "TimeWindow",
    "TimedSample",
    "retry_with_delay",
]
