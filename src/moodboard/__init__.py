"""Moodboard - responsive grid of remotely generated images."""

__version__ = "0.1.0"

from moodboard.core.config import MoodboardConfig, config

__all__ = [
    "MoodboardConfig",
    "config",
]
