"""Timer package."""

from .engine import TimerEngine, TICK_INTERVAL_MS

__all__ = ["TimerEngine", "TICK_INTERVAL_MS"]
