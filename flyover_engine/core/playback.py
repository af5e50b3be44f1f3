# flyover_engine/core/playback.py

from typing import Dict, Optional
import numpy as np
from flyover_engine.core.logging import get_logger

logger = get_logger()

DEFAULT_SPEEDS = {'0.5': 0.125, '1': 0.25, '2': 0.5, '4': 1.0}


class PlaybackClock:
    """
    Advances route progress in [0, 1].

    A full traversal takes max(min_duration, km / 100 * base_duration) seconds
    at speed multiplier 1. Reaching the end stops playback.
    """

    def __init__(self, route_length_km: float, base_duration: float = 600.0, min_duration: float = 180.0,
                 speeds: Optional[Dict[str, float]] = None):
        self.route_length_km = max(float(route_length_km), 0.0)
        self.base_duration = base_duration  # seconds per 100 km
        self.min_duration = min_duration
        self.speeds = dict(speeds or DEFAULT_SPEEDS)

        self.progress = 0.0
        self.playing = False

    @property
    def duration(self) -> float:
        return max(self.min_duration, self.route_length_km / 100.0 * self.base_duration)

    def advance(self, dt: float, speed_multiplier: float) -> float:
        """Move progress forward by dt seconds of playback. Returns the new progress."""
        if not self.playing or dt <= 0 or speed_multiplier <= 0:
            return self.progress

        self.progress = min(1.0, self.progress + dt / self.duration * speed_multiplier)
        if self.progress >= 1.0:
            self.playing = False
            logger.info("Reached end of route")
        return self.progress

    def seek(self, progress: float) -> float:
        """Jump to a progress value, clamped to [0, 1]."""
        if progress is None or not np.isfinite(progress):
            logger.warning(f"Ignoring seek to {progress}")
            return self.progress
        self.progress = float(np.clip(progress, 0.0, 1.0))
        return self.progress

    def play(self):
        if self.progress >= 1.0:
            self.progress = 0.0
        self.playing = True

    def pause(self):
        self.playing = False

    def speed_for(self, label: str) -> Optional[float]:
        """Speed multiplier for a preset label, or None if unknown. Numeric labels match by value."""
        key = str(label).strip()
        if key not in self.speeds:
            try:
                key = f"{float(key):g}"
            except ValueError:
                return None
        return self.speeds.get(key)
