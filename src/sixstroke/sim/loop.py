"""Fixed-rate simulation loop.

One iteration = poll one command, update once, render once, then sleep
whatever is left of the frame budget. Overrunning frames are not skipped
or caught up; the next tick simply sees a longer ``dt``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from ..core.logging import get_logger
from ..core.types import Command, DisplaySnapshot
from .clock import FrameClock
from .engine import EngineSimulation

logger = get_logger(__name__)


class Console(Protocol):
    """Input/output capability injected into the loop."""

    def poll_command(self) -> Command:
        """Return the pending command without blocking (``Command.NONE`` if none)."""
        ...

    def display(self, snapshot: DisplaySnapshot) -> None:
        """Render one snapshot."""
        ...


def run_loop(
    sim: EngineSimulation,
    console: Console,
    *,
    tick_rate: float | None = None,
    max_ticks: int | None = None,
    frame_clock: FrameClock | None = None,
    now: Callable[[], float] = time.perf_counter,
    sleep: Callable[[float], None] = time.sleep,
) -> DisplaySnapshot | None:
    """Run the simulation until ``max_ticks`` (forever if None).

    Args:
        sim: Simulation to drive.
        console: Command source and snapshot sink.
        tick_rate: Target ticks per second (config value if None).
        max_ticks: Stop after this many ticks.
        frame_clock: FPS estimator (new one on ``now`` if None).
        now: Monotonic time source (s).
        sleep: Sleep function (s).

    Returns:
        The last snapshot emitted, or None if no tick ran.
    """
    rate = tick_rate or sim.config.simulation.tick_rate
    target_frame_time = 1.0 / rate
    clock = frame_clock or FrameClock(sim.config.simulation.fps_window, now=now)

    logger.info("loop start", tick_rate=rate, max_ticks=max_ticks)
    last: DisplaySnapshot | None = None
    previous_start = now()
    ticks = 0

    while max_ticks is None or ticks < max_ticks:
        frame_start = now()

        command = console.poll_command()
        elapsed = frame_start - previous_start
        fps = clock.tick()
        last = sim.update(elapsed, command, fps=fps)
        console.display(last)

        frame_duration = now() - frame_start
        if frame_duration < target_frame_time:
            sleep(target_frame_time - frame_duration)

        previous_start = frame_start
        ticks += 1

    logger.info("loop stop", ticks=ticks)
    return last
