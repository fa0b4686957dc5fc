"""Application settings with JSON persistence.

Settings are stored at:
    $LOOPTIMER_HOME/settings.json   (default ~/.looptimer/settings.json)

Usage::

    settings = load_settings()
    settings.default_volume = 0.5
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .audio.tones import DEFAULT_TONE_ID, TONES, clamp_volume
from .models import TimerConfig


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path(os.environ.get("LOOPTIMER_HOME", Path.home() / ".looptimer"))
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

THEME_IDS = ("dark", "light", "modern", "retro", "rgb", "futuristic", "colorblind")
DEFAULT_THEME_ID = "dark"

MIN_SAVED_TIMERS = 1
MAX_SAVED_TIMERS = 100


@dataclass
class AppSettings:
    """All user-configurable preferences."""

    theme_id: str = DEFAULT_THEME_ID
    default_volume: float = 0.7            # 0.0-1.0, for new timers
    default_tone_id: str = DEFAULT_TONE_ID
    max_saved_timers: int = 10


def clamp_settings(settings: AppSettings) -> AppSettings:
    """Pull every field back into its valid range, in place."""
    if settings.theme_id not in THEME_IDS:
        settings.theme_id = DEFAULT_THEME_ID
    if settings.default_tone_id not in TONES:
        settings.default_tone_id = DEFAULT_TONE_ID
    settings.default_volume = clamp_volume(settings.default_volume)
    settings.max_saved_timers = max(
        MIN_SAVED_TIMERS, min(MAX_SAVED_TIMERS, int(settings.max_saved_timers))
    )
    return settings


def load_settings() -> AppSettings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(AppSettings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return clamp_settings(AppSettings(**filtered))
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("ignoring unreadable settings at %s: %s", SETTINGS_PATH, exc)
    return AppSettings()


def save_settings(settings: AppSettings) -> None:
    """Write settings to disk as JSON."""
    clamp_settings(settings)
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )


def new_timer_config(settings: AppSettings, **overrides) -> TimerConfig:
    """A fresh ``TimerConfig`` carrying the default tone and volume."""
    values = {
        "tone_id": settings.default_tone_id,
        "volume": settings.default_volume,
    }
    values.update(overrides)
    return TimerConfig.create(**values)
