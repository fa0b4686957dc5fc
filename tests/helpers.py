"""Shared test helpers for LoopTimer."""

from looptimer.models import TimerConfig
from looptimer.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class ToneRecorder:
    """Stand-in tone hook that records ``(tone_id, volume)`` calls."""

    def __init__(self):
        self.calls: list[tuple[str, float]] = []

    def __call__(self, tone_id: str, volume: float) -> None:
        self.calls.append((tone_id, volume))

    def __len__(self):
        return len(self.calls)


def make_config(**overrides) -> TimerConfig:
    values = {"name": "Test", "duration_seconds": 3}
    values.update(overrides)
    return TimerConfig.create(**values)


def run_ticks(engine: TimerEngine, count: int) -> None:
    """Deliver *count* one-second ticks without an event loop."""
    for _ in range(count):
        engine._on_tick()


def finish_rep(engine: TimerEngine) -> None:
    """Fast-complete the current countdown by jumping to the last tick."""
    engine._remaining = 1
    engine._on_tick()
