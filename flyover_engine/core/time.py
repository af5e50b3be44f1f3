# flyover_engine/core/time.py

import time
from typing import Callable, Optional


class FrameScheduler:
    """
    Drives a per-frame callback with a measured delta time.
    Lag spikes (debugger pauses, window drags) are clamped to max_frame_delta.
    """

    def __init__(self, callback: Callable[[float], object], max_frame_delta: float = 0.25,
                 frame_rate: Optional[float] = None, clock: Callable[[], float] = time.perf_counter,
                 sleep: Callable[[float], None] = time.sleep):
        self.callback = callback
        self.max_frame_delta = max_frame_delta
        self.frame_interval = 1.0 / frame_rate if frame_rate else 0.0
        self.clock = clock
        self.sleep = sleep

        self.frame_count = 0
        self.running = False
        self._last_frame_time: Optional[float] = None

    def step(self) -> float:
        """Run one frame. Returns the delta time handed to the callback."""
        current_time = self.clock()
        if self._last_frame_time is None:
            delta = 0.0
        else:
            delta = min(max(current_time - self._last_frame_time, 0.0), self.max_frame_delta)
        self._last_frame_time = current_time

        self.callback(delta)
        self.frame_count += 1
        return delta

    def run(self, max_frames: Optional[int] = None):
        """Run frames until stop() is called or max_frames have run."""
        self.running = True
        frames = 0
        while self.running and (max_frames is None or frames < max_frames):
            frame_start = self.clock()
            self.step()
            frames += 1

            if self.frame_interval > 0:
                remaining = self.frame_interval - (self.clock() - frame_start)
                if remaining > 0:
                    self.sleep(remaining)
        self.running = False

    def stop(self):
        self.running = False
