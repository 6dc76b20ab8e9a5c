"""Pytest configuration for sixstroke.

The update tick draws a random jerk perturbation and may randomly toggle
water injection. Scenario tests inject a fixed random source so a tick is
fully deterministic; property tests use a seeded numpy Generator.
"""

from __future__ import annotations

import numpy as np
import pytest

from sixstroke.core.config import SixStrokeConfig, default_config
from sixstroke.sim.engine import EngineSimulation


class FixedRng:
    """Random source returning constant draws.

    ``integers`` always yields ``jerk_step`` (clipped to the requested
    range); ``random`` always yields ``uniform`` (1.0 never triggers a
    probability check).
    """

    def __init__(self, jerk_step: int = 0, uniform: float = 1.0) -> None:
        self.jerk_step = jerk_step
        self.uniform = uniform

    def integers(self, low: int, high: int) -> int:
        return int(min(max(self.jerk_step, low), high - 1))

    def random(self) -> float:
        return self.uniform


@pytest.fixture
def config() -> SixStrokeConfig:
    return default_config()


@pytest.fixture
def quiet_sim(config: SixStrokeConfig) -> EngineSimulation:
    """Simulation with no jerk noise and no random water-injection toggles."""
    return EngineSimulation(config, rng=FixedRng())


@pytest.fixture
def seeded_sim(config: SixStrokeConfig) -> EngineSimulation:
    return EngineSimulation(config, rng=np.random.default_rng(1234))


@pytest.fixture
def fixed_rng():
    """Factory for constant random sources."""
    return FixedRng
