"""Timing constants for the candidate quiz session."""

TICK_INTERVAL_SECONDS: float = 1.0
LOW_TIME_WARNING_SECONDS: int = 300
