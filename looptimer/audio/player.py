"""Tone playback through QSoundEffect.

QSoundEffect plays from a URL, so rendered tones are written once to a
cache directory and reused.  Files are keyed by tone id and the exact
volume because the volume is baked into the samples.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR
from .tones import TONES, DEFAULT_TONE_ID, clamp_volume, synthesize


logger = logging.getLogger(__name__)

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"
PREVIEW_VOLUME = 0.7


class TonePlayer(QObject):
    """Plays synthesized tones, one at a time.

    Usage::

        player = TonePlayer(parent=self)
        engine = TimerEngine(on_play_tone=player.play_tone)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effect = QSoundEffect(self)
        self._last_path: Path | None = None

    # ── public API ────────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.stop()

    @property
    def last_path(self) -> Path | None:
        """WAV file most recently handed to the sound effect."""
        return self._last_path

    def play_tone(self, tone_id: str, volume: float) -> None:
        """Stop whatever is playing, then play *tone_id* at *volume*."""
        if not self._enabled:
            return
        volume = clamp_volume(volume)
        try:
            path = self._ensure_wav(tone_id, volume)
        except OSError:
            logger.exception("could not cache tone %r", tone_id)
            return
        self._effect.stop()
        self._effect.setSource(QUrl.fromLocalFile(str(path)))
        self._effect.setVolume(volume)
        self._effect.play()
        self._last_path = path

    def preview_tone(self, tone_id: str) -> None:
        self.play_tone(tone_id, PREVIEW_VOLUME)

    def stop(self) -> None:
        self._effect.stop()

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav(self, tone_id: str, volume: float) -> Path:
        if tone_id not in TONES:
            tone_id = DEFAULT_TONE_ID
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        path = self._sounds_dir / f"{tone_id}-{volume!r}.wav"
        if not path.exists():
            # Write aside and rename so a reader never sees a partial file.
            tmp = path.with_name(path.name + ".tmp")
            tmp.write_bytes(synthesize(tone_id, volume))
            tmp.replace(path)
        return path
