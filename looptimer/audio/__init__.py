"""Audio package.  ``player`` needs QtMultimedia and is imported directly."""

from .tones import (
    synthesize,
    tone_label,
    tone_duration,
    TONES,
    TONE_IDS,
    DEFAULT_TONE_ID,
    SAMPLE_RATE,
)

__all__ = [
    "synthesize",
    "tone_label",
    "tone_duration",
    "TONES",
    "TONE_IDS",
    "DEFAULT_TONE_ID",
    "SAMPLE_RATE",
]
