"""Simulation module — engine state machine, frame clock and loop."""

from .clock import FrameClock, SimulatedClock
from .engine import EngineSimulation
from .loop import Console, run_loop

__all__ = ["Console", "EngineSimulation", "FrameClock", "SimulatedClock", "run_loop"]
