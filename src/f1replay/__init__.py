"""Race telemetry replay: tiered OpenF1 data access and a virtual race clock."""

__version__ = "0.1.0"
