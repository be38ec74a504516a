"""
Tick timing: processing rate, loop pacing and analysis durations.
"""

import time
from collections import deque
from typing import Optional


class FPSCounter:
    """
    Rolling frames-per-second estimate over the last ticks.

    Reported with every TickResult so consumers can tell a stalled
    camera from a slow pipeline.
    """

    def __init__(self, window_size: int = 30):
        """
        Initialize FPS counter.

        Args:
            window_size: Number of tick intervals to average over
        """
        self._intervals: deque[float] = deque(maxlen=window_size)
        self._last_tick: Optional[float] = None

    def tick(self) -> float:
        """
        Register a tick and return the current rate.

        Returns:
            Current FPS, 0.0 until two ticks were seen
        """
        now = time.perf_counter()

        if self._last_tick is not None:
            self._intervals.append(now - self._last_tick)

        self._last_tick = now
        return self.fps

    @property
    def fps(self) -> float:
        if not self._intervals:
            return 0.0

        mean_interval = sum(self._intervals) / len(self._intervals)
        if mean_interval <= 0:
            return 0.0

        return 1.0 / mean_interval

    def reset(self):
        """Forget all recorded ticks."""
        self._intervals.clear()
        self._last_tick = None


class FrameRateLimiter:
    """
    Pace a capture loop to a target rate.

    The core never sleeps; only the camera loop in main uses this.
    """

    def __init__(self, target_fps: float):
        self._min_interval = 1.0 / target_fps if target_fps > 0 else 0.0
        self._last_frame: Optional[float] = None

    def wait(self):
        """Sleep for whatever is left of the current frame interval."""
        now = time.perf_counter()

        if self._last_frame is not None:
            remaining = self._min_interval - (now - self._last_frame)
            if remaining > 0:
                time.sleep(remaining)
                now = time.perf_counter()

        self._last_frame = now

    def reset(self):
        self._last_frame = None


class Timer:
    """Context manager measuring a block, e.g. one frame analysis."""

    def __init__(self, name: str = ""):
        self.name = name
        self.start_time: Optional[float] = None
        self.elapsed: float = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        if self.start_time is not None:
            self.elapsed = time.perf_counter() - self.start_time

    def __str__(self) -> str:
        name_str = f"{self.name}: " if self.name else ""
        return f"{name_str}{self.elapsed * 1000:.2f}ms"
