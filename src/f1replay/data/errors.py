"""Source-agnostic data errors."""

from __future__ import annotations


class F1DataError(Exception):
    """Source-agnostic data fetch error. Fetchers catch only this and OpenF1Error."""


class CacheError(F1DataError):
    """The cache tier could not be reached or answered with an error."""


class StoreError(F1DataError):
    """The durable store could not be reached or answered with an error."""


class ChunkFetchError(F1DataError):
    """A time-windowed chunk still failed after its retries were exhausted."""

    def __init__(self, key: str, attempts: int, cause: BaseException | None) -> None:
        self.key = key
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Chunk {key} failed after {attempts} attempts: {cause}")
