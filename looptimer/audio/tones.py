"""Tone synthesis as self-contained WAV bytes using numpy.

Every tone is generated algorithmically; nothing is loaded from disk.

Tone ids
--------
- ``beep``     — 880 Hz sine, 0.4 s, click-free fades
- ``chime``    — 660 Hz sine with fast exponential decay, 0.8 s
- ``bell``     — 528 Hz sine with slow exponential decay, 1.0 s
- ``alarm``    — 1000 Hz sine, 3 × 0.3 s with 0.1 s gaps
- ``gentle``   — 440 Hz sine under a Hann envelope, 0.6 s
- ``buzz``     — 220 Hz sawtooth, 0.5 s, click-free fades
- ``digital``  — 1200 Hz sine, 5 × 0.2 s with 0.05 s gaps
"""

from __future__ import annotations

import io
import wave
from dataclasses import dataclass
from enum import Enum

import numpy as np


SAMPLE_RATE = 44100
CHANNELS = 1
SAMPLE_WIDTH = 2  # bytes, 16-bit signed
INT16_MAX = 32767
INT16_MIN = -32768

FADE_SECONDS = 0.01


class ToneShape(Enum):
    SINE = "sine"
    SAWTOOTH = "sawtooth"
    DECAY = "decay"
    LONG_DECAY = "long_decay"
    SMOOTH = "smooth"


@dataclass(frozen=True)
class ToneDef:
    """One catalog entry.  ``repetitions > 1`` builds a repeated tone."""

    label: str
    frequency: float
    duration: float
    shape: ToneShape
    repetitions: int = 1
    silence: float = 0.0


# ── catalog ──────────────────────────────────────────────────────────────

TONES: dict[str, ToneDef] = {
    "beep": ToneDef("Beep", 880.0, 0.4, ToneShape.SINE),
    "chime": ToneDef("Chime", 660.0, 0.8, ToneShape.DECAY),
    "bell": ToneDef("Bell", 528.0, 1.0, ToneShape.LONG_DECAY),
    "alarm": ToneDef("Alarm", 1000.0, 0.3, ToneShape.SINE, repetitions=3, silence=0.1),
    "gentle": ToneDef("Gentle", 440.0, 0.6, ToneShape.SMOOTH),
    "buzz": ToneDef("Buzz", 220.0, 0.5, ToneShape.SAWTOOTH),
    "digital": ToneDef("Digital", 1200.0, 0.2, ToneShape.SINE, repetitions=5, silence=0.05),
}

TONE_IDS = tuple(TONES)
DEFAULT_TONE_ID = "beep"


def clamp_volume(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def resolve_tone(tone_id: str) -> ToneDef:
    """Catalog entry for *tone_id*, or the default tone when unknown."""
    return TONES.get(tone_id, TONES[DEFAULT_TONE_ID])


def tone_label(tone_id: str) -> str:
    entry = TONES.get(tone_id)
    return entry.label if entry is not None else tone_id


def tone_duration(tone_id: str) -> float:
    """Total playing time in seconds, including silence gaps."""
    entry = resolve_tone(tone_id)
    return entry.duration * entry.repetitions + entry.silence * (entry.repetitions - 1)


# ═══════════════════════════════════════════════════════════════════════════
#  SAMPLE GENERATION
# ═══════════════════════════════════════════════════════════════════════════


def _round_half_away(values: np.ndarray) -> np.ndarray:
    # Half away from zero, not numpy's half-to-even.
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def _fade_gain(n_samples: int) -> np.ndarray:
    """Linear 0→1 / 1→0 gain over the first and last 10 ms."""
    fade = min(int(round(FADE_SECONDS * SAMPLE_RATE)), n_samples // 2)
    gain = np.ones(n_samples, dtype=np.float64)
    if fade > 0:
        i = np.arange(n_samples, dtype=np.float64)
        gain[:fade] = i[:fade] / fade
        gain[n_samples - fade:] = (n_samples - 1 - i[n_samples - fade:]) / fade
    return gain


def _waveform(frequency: float, duration: float, shape: ToneShape) -> np.ndarray:
    """Float waveform in [-1, 1] for one segment, envelope included."""
    n = int(round(duration * SAMPLE_RATE))
    i = np.arange(n, dtype=np.float64)
    t = i / SAMPLE_RATE

    if shape == ToneShape.SAWTOOTH:
        phase = t * frequency
        raw = 2.0 * (phase - np.floor(phase + 0.5))
    else:
        raw = np.sin(2.0 * np.pi * frequency * t)

    if shape == ToneShape.DECAY:
        raw = raw * np.exp(-3.0 * t / duration)
    elif shape == ToneShape.LONG_DECAY:
        raw = raw * np.exp(-2.0 * t / duration)
    elif shape == ToneShape.SMOOTH:
        if n > 1:
            raw = raw * 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (n - 1)))
    else:
        # Plain sine and sawtooth have no envelope of their own.
        raw = raw * _fade_gain(n)
    return raw


def pcm_samples(
    frequency: float,
    duration: float,
    volume: float,
    shape: ToneShape,
) -> np.ndarray:
    """16-bit signed samples for a single tone segment."""
    scaled = _waveform(frequency, duration, shape) * (volume * INT16_MAX)
    return np.clip(_round_half_away(scaled), INT16_MIN, INT16_MAX).astype(np.int16)


def repeated_samples(
    frequency: float,
    duration: float,
    silence: float,
    repetitions: int,
    volume: float,
    shape: ToneShape,
) -> np.ndarray:
    """``tone, silence, tone, …, tone`` — no trailing silence."""
    tone = pcm_samples(frequency, duration, volume, shape)
    gap = np.zeros(int(round(silence * SAMPLE_RATE)), dtype=np.int16)
    parts: list[np.ndarray] = []
    for rep in range(repetitions):
        parts.append(tone)
        if rep < repetitions - 1:
            parts.append(gap)
    if not parts:
        return np.zeros(0, dtype=np.int16)
    return np.concatenate(parts)


# ═══════════════════════════════════════════════════════════════════════════
#  WAV PACKAGING
# ═══════════════════════════════════════════════════════════════════════════


def to_wav_bytes(samples: np.ndarray) -> bytes:
    """Wrap int16 mono samples in a 44-byte-header PCM WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(CHANNELS)
        wf.setsampwidth(SAMPLE_WIDTH)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(samples.astype("<i2").tobytes())
    return buf.getvalue()


def synthesize(tone_id: str, volume: float) -> bytes:
    """Render *tone_id* at *volume* (0.0–1.0) as complete WAV bytes.

    Unknown ids fall back to ``beep``.  Output is deterministic for a given
    ``(tone_id, volume)`` pair.
    """
    entry = resolve_tone(tone_id)
    volume = clamp_volume(volume)
    if entry.repetitions > 1:
        samples = repeated_samples(
            entry.frequency,
            entry.duration,
            entry.silence,
            entry.repetitions,
            volume,
            entry.shape,
        )
    else:
        samples = pcm_samples(entry.frequency, entry.duration, volume, entry.shape)
    return to_wav_bytes(samples)
