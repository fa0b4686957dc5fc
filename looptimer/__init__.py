"""LoopTimer — repeating countdown timer with synthesized tones."""

__version__ = "0.1.0"
