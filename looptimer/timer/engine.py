"""Countdown / repeat / delay state machine for LoopTimer.

States
------
IDLE        No session.
RUNNING     Counting down ``duration_seconds`` for the current rep.
DELAY       Counting down ``delay_seconds`` between reps.
PAUSED      Frozen; the phase tag remembers RUNNING or DELAY.
COMPLETED   Last rep finished.  Only start / stop leave it.

Transitions
-----------
any → RUNNING                       (start)
RUNNING | DELAY → PAUSED            (pause)
PAUSED → {whatever was paused}      (resume)
RUNNING → DELAY | RUNNING           (rep finished, more reps to go)
RUNNING → COMPLETED                 (rep finished, none left)
DELAY → RUNNING                     (delay finished)
any → IDLE                          (stop)

Control calls made in the wrong phase are silent no-ops.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, QTimer, pyqtSignal

from ..models import ActiveTimerState, Paused, Phase, TimerConfig, TimerPhase


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000

PlayToneHook = Callable[[str, float], None]


class TimerEngine(QObject):
    """Qt-based repeat timer driven by a one-second ``QTimer``.

    Signals
    -------
    state_changed(state: ActiveTimerState)
        Emitted after every transition and every per-second decrement.
    rep_completed(rep: int)
        Emitted when a rep's countdown reaches zero, with that rep's number.
    """

    state_changed = pyqtSignal(object)
    rep_completed = pyqtSignal(int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        on_play_tone: Optional[PlayToneHook] = None,
    ) -> None:
        super().__init__(parent)
        self._on_play_tone = on_play_tone

        # ── session state ─────────────────────────────────────────────
        self._config: TimerConfig | None = None
        self._phase: Phase = TimerPhase.IDLE
        self._remaining: int = 0
        self._rep: int = 1
        self._snapshot: ActiveTimerState | None = None

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> TimerPhase:
        if isinstance(self._phase, Paused):
            return TimerPhase.PAUSED
        return self._phase

    @property
    def resume_phase(self) -> TimerPhase | None:
        """Phase a paused session will resume into, else ``None``."""
        if isinstance(self._phase, Paused):
            return self._phase.resume_to
        return None

    @property
    def config(self) -> TimerConfig | None:
        return self._config

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def current_rep(self) -> int:
        return self._rep

    @property
    def snapshot(self) -> ActiveTimerState | None:
        """Last emitted snapshot, or ``None`` when no session is active.

        New subscribers are not replayed the current state; they read it
        from here.
        """
        return self._snapshot

    @property
    def is_ticking(self) -> bool:
        return self._qt_timer.isActive()

    def subscribe(self, slot: Callable[[ActiveTimerState], None]) -> Callable[[], None]:
        """Connect *slot* to ``state_changed``; return a disconnect callable."""
        self.state_changed.connect(slot)

        def unsubscribe() -> None:
            self.state_changed.disconnect(slot)

        return unsubscribe

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, config: TimerConfig) -> None:
        """Begin a session, silently discarding any current one."""
        self._qt_timer.stop()
        self._config = config
        self._rep = 1
        logger.debug("start %s", config)
        self._begin_countdown()

    def pause(self) -> None:
        if self._phase not in (TimerPhase.RUNNING, TimerPhase.DELAY):
            return
        self._qt_timer.stop()
        self._phase = Paused(resume_to=self._phase)
        self._emit()

    def resume(self) -> None:
        if not isinstance(self._phase, Paused):
            return
        self._phase = self._phase.resume_to
        self._qt_timer.start()
        self._emit()

    def stop(self) -> None:
        """Cancel the session.  Emits a final IDLE snapshot if one was active."""
        self._qt_timer.stop()
        self._phase = TimerPhase.IDLE
        if self._config is not None:
            self._emit()
        self._config = None
        self._snapshot = None

    def dispose(self) -> None:
        """Stop ticking and drop the session without emitting."""
        self._qt_timer.stop()
        self._phase = TimerPhase.IDLE
        self._config = None
        self._snapshot = None

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _begin_countdown(self) -> None:
        self._phase = TimerPhase.RUNNING
        self._remaining = self._config.duration_seconds
        self._qt_timer.start()
        self._emit()

    def _begin_delay(self) -> None:
        self._phase = TimerPhase.DELAY
        self._remaining = self._config.delay_seconds
        self._qt_timer.start()
        self._emit()

    def _on_tick(self) -> None:
        if self._config is None or isinstance(self._phase, Paused):
            return
        if self._phase not in (TimerPhase.RUNNING, TimerPhase.DELAY):
            return

        self._remaining -= 1
        if self._remaining > 0:
            self._emit()
            return

        if self._phase == TimerPhase.RUNNING:
            self._finish_rep()
        else:
            self._qt_timer.stop()
            self._begin_countdown()

    def _finish_rep(self) -> None:
        config = self._config
        finished = self._rep
        self._play_tone(config)
        self.rep_completed.emit(finished)
        if self._config is not config or self._phase != TimerPhase.RUNNING:
            # A slot stopped, paused or restarted the session.
            return

        has_more = config.infinite_repeat or finished < config.repeat_count
        if not has_more:
            self._qt_timer.stop()
            self._phase = TimerPhase.COMPLETED
            self._remaining = 0
            logger.debug("completed after %d reps", finished)
            self._emit()
            return

        self._rep += 1
        if config.delay_seconds > 0:
            self._qt_timer.stop()
            self._begin_delay()
        else:
            # Same QTimer keeps running; the next tick belongs to the new rep.
            self._remaining = config.duration_seconds
            self._emit()

    def _play_tone(self, config: TimerConfig) -> None:
        if self._on_play_tone is None:
            return
        try:
            self._on_play_tone(config.tone_id, config.volume)
        except Exception:
            logger.exception("tone playback failed for %r", config.tone_id)

    def _emit(self) -> None:
        config = self._config
        if config is None:
            return
        resume_to = self._phase.resume_to if isinstance(self._phase, Paused) else None
        self._snapshot = ActiveTimerState(
            phase=self.phase,
            seconds_remaining=self._remaining,
            current_rep=self._rep,
            total_reps=config.total_reps,
            config=config,
            resume_to=resume_to,
        )
        self.state_changed.emit(self._snapshot)
