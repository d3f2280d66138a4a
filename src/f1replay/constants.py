"""Shared constants for the replay engine and its data tiers."""

from __future__ import annotations

# ── Endpoints ────────────────────────────────────────────────────────────────

OPENF1_BASE_URL = "https://api.openf1.org/v1"
CACHE_SERVER_URL = "http://localhost:3001"
DURABLE_STORE_URL = "http://localhost:3001/db"
DEFAULT_TIMEOUT = 30.0

# ── Request queue ────────────────────────────────────────────────────────────

MAX_REQUESTS_PER_SECOND = 3  # OpenF1 public limit
RATE_WINDOW_SECONDS = 1.0
MIN_REQUEST_SPACING_SECONDS = 0.4

# ── Cache tier ───────────────────────────────────────────────────────────────

CACHE_TTL_MS = 24 * 60 * 60 * 1000
DRIVER_CACHE_TTL_MS = 30 * CACHE_TTL_MS

# ── Chunked fetching (car telemetry, location) ───────────────────────────────

CHUNK_MINUTES = 15
ESTIMATED_SESSION_MINUTES = 180
CHUNK_MAX_RETRIES = 3
CAR_DATA_RETRY_DELAY = 2.0
LOCATION_RETRY_DELAY = 1.0

# ── Virtual clock ────────────────────────────────────────────────────────────

TICK_INTERVAL_SECONDS = 0.1
MIN_SPEED = 1.0
MAX_SPEED = 20.0

# ── Live polling ─────────────────────────────────────────────────────────────

LIVE_POLL_SECONDS = 5.0
SESSION_POLL_SECONDS = 30.0

# Lap 1 is distorted by the grid procedure, so start inference reads lap 2.
START_REFERENCE_LAP = 2
