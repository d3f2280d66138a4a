"""Query filter builder for the API's comparison operators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

FilterValue = int | float | str | datetime


def format_param(value: Any) -> str:
    """Render a query value; datetimes become UTC ISO-8601 strings."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat()
    return str(value)


@dataclass(frozen=True)
class Filter:
    """A comparison filter for one query parameter.

    Usage:
        # Time window, as used for chunked telemetry fetches
        Filter(gt=window_start, lt=window_end)  # produces: date>...&date<...

        # Inclusive lap range
        Filter(gte=5, lte=10)  # produces: lap_number>=5&lap_number<=10
    """

    gt: FilterValue | None = None
    gte: FilterValue | None = None
    lt: FilterValue | None = None
    lte: FilterValue | None = None

    def to_params(self, key: str) -> list[tuple[str, str]]:
        """Convert this filter to a list of (key_with_operator, value) pairs."""
        operators = (
            (">", self.gt),
            (">=", self.gte),
            ("<", self.lt),
            ("<=", self.lte),
        )
        return [
            (f"{key}{op}", format_param(value))
            for op, value in operators
            if value is not None
        ]


def build_query_params(**kwargs: Any) -> list[tuple[str, str]]:
    """Build a list of query parameter tuples from keyword arguments.

    Plain values become equality filters, ``Filter`` instances become
    comparison operators and ``None`` values are skipped.
    """
    params: list[tuple[str, str]] = []
    for key, value in kwargs.items():
        if value is None:
            continue
        if isinstance(value, Filter):
            params.extend(value.to_params(key))
        else:
            params.append((key, format_param(value)))
    return params
