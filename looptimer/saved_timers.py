"""User-ordered list of saved timer presets, persisted with SQLAlchemy.

Every mutation writes the whole list back immediately.  The in-memory
list stays authoritative if a write fails.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal
from sqlalchemy.exc import SQLAlchemyError

from .database.db import get_session
from .database.models import SavedTimer
from .models import TimerConfig
from .settings import AppSettings


logger = logging.getLogger(__name__)


def _to_config(row: SavedTimer) -> TimerConfig:
    return TimerConfig(
        id=row.id,
        name=row.name,
        duration_seconds=row.duration_seconds,
        infinite_repeat=bool(row.infinite_repeat),
        repeat_count=row.repeat_count,
        delay_seconds=row.delay_seconds,
        tone_id=row.tone_id,
        volume=row.volume,
        created_at=row.created_at,
    )


def _to_row(config: TimerConfig, position: int) -> SavedTimer:
    return SavedTimer(
        id=config.id,
        position=position,
        name=config.name,
        duration_seconds=config.duration_seconds,
        infinite_repeat=config.infinite_repeat,
        repeat_count=config.repeat_count,
        delay_seconds=config.delay_seconds,
        tone_id=config.tone_id,
        volume=config.volume,
        created_at=config.created_at,
    )


class SavedTimers(QObject):
    """Saved-timer store capped at ``settings.max_saved_timers``.

    Signals
    -------
    changed()
        Emitted after every load and every applied mutation.
    """

    changed = pyqtSignal()

    def __init__(self, settings: AppSettings, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._settings = settings
        self._timers: list[TimerConfig] = []

    # ── public API ────────────────────────────────────────────────────

    @property
    def timers(self) -> tuple[TimerConfig, ...]:
        return tuple(self._timers)

    @property
    def can_save_more(self) -> bool:
        return len(self._timers) < self._settings.max_saved_timers

    def find(self, name_or_id: str) -> TimerConfig | None:
        for config in self._timers:
            if name_or_id in (config.id, config.name):
                return config
        return None

    def load(self) -> None:
        """Read the saved list.  Any database error yields an empty list."""
        try:
            with get_session() as db:
                rows = db.query(SavedTimer).order_by(SavedTimer.position).all()
                loaded: list[TimerConfig] = []
                for row in rows:
                    try:
                        loaded.append(_to_config(row))
                    except (TypeError, ValueError) as exc:
                        logger.warning("skipping malformed saved timer %r: %s", row.id, exc)
            self._timers = loaded
        except SQLAlchemyError as exc:
            logger.warning("could not load saved timers: %s", exc)
            self._timers = []
        self.changed.emit()

    def add(self, config: TimerConfig) -> None:
        """Append *config*.  Ignored once the cap is reached."""
        if not self.can_save_more:
            return
        self._timers = [*self._timers, config]
        self._commit()

    def update(self, config: TimerConfig) -> None:
        """Replace the timer sharing *config*'s id.  Ignored if absent."""
        for index, existing in enumerate(self._timers):
            if existing.id == config.id:
                updated = list(self._timers)
                updated[index] = config
                self._timers = updated
                self._commit()
                return

    def delete(self, timer_id: str) -> None:
        updated = [t for t in self._timers if t.id != timer_id]
        if len(updated) == len(self._timers):
            return
        self._timers = updated
        self._commit()

    def reorder(self, old_index: int, new_index: int) -> None:
        """Move a timer.  *new_index* is the target slot counted before the
        item is removed, as list views report it."""
        count = len(self._timers)
        if (
            old_index < 0
            or old_index >= count
            or new_index < 0
            or new_index > count
            or old_index == new_index
        ):
            return

        updated = list(self._timers)
        item = updated.pop(old_index)
        insert_at = new_index - 1 if new_index > old_index else new_index
        updated.insert(insert_at, item)
        self._timers = updated
        self._commit()

    # ── internal ──────────────────────────────────────────────────────

    def _commit(self) -> None:
        self.changed.emit()
        self._persist()

    def _persist(self) -> None:
        try:
            with get_session() as db:
                db.query(SavedTimer).delete()
                db.add_all(
                    _to_row(config, position)
                    for position, config in enumerate(self._timers)
                )
        except SQLAlchemyError as exc:
            logger.warning("could not save timers: %s", exc)
