"""Value types shared by the engine, the stores and the CLI."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from .audio.tones import DEFAULT_TONE_ID, clamp_volume


DEFAULT_DURATION = 60
DEFAULT_VOLUME = 0.7


class TimerPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DELAY = "delay"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Paused:
    """Paused phase tag.  Remembers which countdown window to resume."""

    resume_to: TimerPhase


Phase = Union[TimerPhase, Paused]


# ── timer configuration ───────────────────────────────────────────────────


@dataclass(frozen=True, eq=False)
class TimerConfig:
    """A saved or ad-hoc timer.  ``repeat_count`` is ignored when
    ``infinite_repeat`` is set.  Two configs are equal when their ids match.
    """

    id: str
    name: str
    duration_seconds: int
    infinite_repeat: bool = False
    repeat_count: int = 1
    delay_seconds: int = 0
    tone_id: str = DEFAULT_TONE_ID
    volume: float = DEFAULT_VOLUME
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "duration_seconds", max(1, int(self.duration_seconds)))
        object.__setattr__(self, "repeat_count", max(1, int(self.repeat_count)))
        object.__setattr__(self, "delay_seconds", max(0, int(self.delay_seconds)))
        object.__setattr__(self, "volume", clamp_volume(self.volume))

    @classmethod
    def create(
        cls,
        name: str | None = None,
        duration_seconds: int = DEFAULT_DURATION,
        infinite_repeat: bool = False,
        repeat_count: int = 1,
        delay_seconds: int = 0,
        tone_id: str = DEFAULT_TONE_ID,
        volume: float = DEFAULT_VOLUME,
    ) -> TimerConfig:
        return cls(
            id=str(uuid.uuid4()),
            name=name or "Timer",
            duration_seconds=duration_seconds,
            infinite_repeat=infinite_repeat,
            repeat_count=repeat_count,
            delay_seconds=delay_seconds,
            tone_id=tone_id,
            volume=volume,
            created_at=datetime.now(),
        )

    @property
    def total_reps(self) -> int:
        """Repetition total as reported in snapshots (0 = infinite)."""
        return 0 if self.infinite_repeat else self.repeat_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "durationSeconds": self.duration_seconds,
            "infiniteRepeat": self.infinite_repeat,
            "repeatCount": self.repeat_count,
            "delaySeconds": self.delay_seconds,
            "toneId": self.tone_id,
            "volume": self.volume,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimerConfig:
        """Inverse of :meth:`to_dict`.  Raises ``KeyError`` / ``ValueError``
        on missing required keys or a malformed timestamp."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            duration_seconds=int(data["durationSeconds"]),
            infinite_repeat=bool(data.get("infiniteRepeat", False)),
            repeat_count=int(data.get("repeatCount", 1)),
            delay_seconds=int(data.get("delaySeconds", 0)),
            tone_id=str(data.get("toneId", DEFAULT_TONE_ID)),
            volume=float(data.get("volume", DEFAULT_VOLUME)),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimerConfig):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return f"TimerConfig({self.name}, {self.duration_seconds}s, repeat={self.repeat_count})"


# ── engine snapshot ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ActiveTimerState:
    """Immutable snapshot emitted by the engine after every change.

    ``total_reps`` is 0 for infinite sessions.  ``resume_to`` is only set
    while ``phase`` is PAUSED.
    """

    phase: TimerPhase
    seconds_remaining: int
    current_rep: int
    total_reps: int
    config: TimerConfig
    resume_to: TimerPhase | None = None

    @property
    def is_infinite(self) -> bool:
        return self.total_reps == 0

    @property
    def window_seconds(self) -> int:
        """Length of the countdown window the snapshot sits in."""
        window = self.resume_to if self.phase == TimerPhase.PAUSED else self.phase
        if window == TimerPhase.DELAY:
            return self.config.delay_seconds
        return self.config.duration_seconds

    @property
    def progress(self) -> float:
        """0.0 → 1.0 through the current window."""
        if self.phase == TimerPhase.IDLE:
            return 0.0
        if self.phase == TimerPhase.COMPLETED:
            return 1.0
        total = self.window_seconds
        if total <= 0:
            return 1.0
        elapsed = total - self.seconds_remaining
        return max(0.0, min(1.0, elapsed / total))
