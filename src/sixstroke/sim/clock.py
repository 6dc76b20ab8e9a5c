"""Frame timing and smoothed FPS."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable

from ..core.constants import FPS_WINDOW


class FrameClock:
    """Windowed frames-per-second estimate over the last ``window`` frames.

    Args:
        window: Number of frame durations kept (FIFO).
        now: Time source in seconds; defaults to ``time.perf_counter``.
    """

    def __init__(self, window: int = FPS_WINDOW, now: Callable[[], float] = time.perf_counter) -> None:
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self._now = now
        self._durations_ms: deque[float] = deque(maxlen=window)
        self._last: float | None = None

    def reset(self, start: float | None = None) -> None:
        """Forget history; optionally seed the previous-frame timestamp."""
        self._durations_ms.clear()
        self._last = start

    def tick(self) -> float:
        """Record one frame boundary and return the current FPS.

        The first call with no prior timestamp records a zero-length frame.
        """
        current = self._now()
        frame_ms = 0.0 if self._last is None else (current - self._last) * 1000.0
        self._last = current
        self._durations_ms.append(frame_ms)
        return self.fps

    @property
    def fps(self) -> float:
        total_ms = sum(self._durations_ms)
        if total_ms <= 0.0:
            return 0.0
        return len(self._durations_ms) / (total_ms / 1000.0)

    @property
    def frame_count(self) -> int:
        return len(self._durations_ms)


class SimulatedClock:
    """Deterministic time source whose ``sleep`` advances ``now``.

    Drives ``run_loop`` headless at exactly the target frame time.
    """

    def __init__(self, start: float = 0.0) -> None:
        self.t = start

    def now(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.t += max(seconds, 0.0)

    def advance(self, seconds: float) -> None:
        self.t += seconds
