"""Formatting helpers for timing values shown next to a snapshot."""

from __future__ import annotations

import math


def format_lap_time(seconds: float | None) -> str:
    """Format seconds as m:ss.fff (or s.fff under a minute); '-' if missing."""
    if not seconds or math.isnan(seconds):
        return "-"
    if seconds >= 60:
        mins, secs = divmod(seconds, 60)
        return f"{int(mins)}:{secs:06.3f}"
    return f"{seconds:.3f}"


def format_gap(gap: float | None) -> str | None:
    """Format a gap between two cars as +s.fffs, or None when not displayable."""
    if gap is None or math.isnan(gap) or gap == 0:
        return None
    return f"+{gap:.3f}s"
