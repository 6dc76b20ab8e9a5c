"""Test the fixed-rate simulation loop."""

import pytest

from sixstroke.adapters.headless import ScriptedConsole
from sixstroke.core.types import Command, TransmissionMode
from sixstroke.sim.clock import SimulatedClock
from sixstroke.sim.engine import EngineSimulation
from sixstroke.sim.loop import run_loop


def test_loop_runs_fixed_ticks(quiet_sim):
    clock = SimulatedClock()
    console = ScriptedConsole([Command.TOGGLE_MODE, Command.UPSHIFT])

    last = run_loop(quiet_sim, console, max_ticks=5, now=clock.now, sleep=clock.sleep)

    assert len(console.snapshots) == 5
    assert last is console.snapshots[-1]
    assert console.snapshots[0].transmission_mode is TransmissionMode.MANUAL
    assert console.snapshots[1].gear == 2
    assert console.snapshots[1].shift_message == "Manually shifted up to gear 2"
    assert [s.tick for s in console.snapshots] == [1, 2, 3, 4, 5]


def test_loop_sleeps_to_target_frame_time(quiet_sim):
    clock = SimulatedClock()
    sleeps = []

    def sleep(seconds):
        sleeps.append(seconds)
        clock.sleep(seconds)

    run_loop(quiet_sim, ScriptedConsole(), tick_rate=60.0, max_ticks=4, now=clock.now, sleep=sleep)

    assert sleeps == pytest.approx([1 / 60] * 4)
    # First tick has no prior frame, later ticks see one frame each
    assert quiet_sim.sim_time == pytest.approx(3 / 60)


def test_loop_does_not_sleep_when_over_budget(quiet_sim):
    t = [0.0]

    def slow_now():
        t[0] += 0.02
        return t[0]

    sleeps = []
    run_loop(quiet_sim, ScriptedConsole(), tick_rate=60.0, max_ticks=3, now=slow_now, sleep=sleeps.append)

    assert sleeps == []
    assert quiet_sim.tick_count == 3


def test_loop_reports_fps(quiet_sim):
    clock = SimulatedClock()
    console = ScriptedConsole()
    run_loop(quiet_sim, console, tick_rate=50.0, max_ticks=10, now=clock.now, sleep=clock.sleep)

    assert console.snapshots[0].fps == 0.0
    assert console.snapshots[-1].fps == pytest.approx(10 / (9 * 0.02))


def test_zero_ticks_returns_none(quiet_sim):
    assert run_loop(quiet_sim, ScriptedConsole(), max_ticks=0) is None


def test_held_accelerator_shifts_up_through_loop(quiet_sim):
    clock = SimulatedClock()
    console = ScriptedConsole([Command.ACCELERATE] * 40)

    last = run_loop(quiet_sim, console, max_ticks=40, now=clock.now, sleep=clock.sleep)

    assert last.tick == 40
    shifted = [s for s in console.snapshots if s.gear == 2]
    assert shifted[0].tick == 31
    assert shifted[0].shift_message == "Shifted to gear 2"
    assert shifted[0].rpm == pytest.approx(2600.0)
    assert last.gear == 2
    assert last.shift_message_visible
