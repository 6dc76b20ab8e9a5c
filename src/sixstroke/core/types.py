"""Core types for engine state, performance metrics and display snapshots.

This module defines the canonical types that form the interface
between the simulation core and the renderer / input adapters.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class TransmissionMode(str, Enum):
    """Gear selection strategy."""

    AUTOMATIC = "Automatic"
    MANUAL = "Manual"

    def toggled(self) -> TransmissionMode:
        """Return the other mode."""
        if self is TransmissionMode.AUTOMATIC:
            return TransmissionMode.MANUAL
        return TransmissionMode.AUTOMATIC


class Command(str, Enum):
    """Discrete control signal polled once per tick."""

    NONE = "none"
    ACCELERATE = "accelerate"
    DECELERATE = "decelerate"
    UPSHIFT = "upshift"
    DOWNSHIFT = "downshift"
    TOGGLE_MODE = "toggle_mode"


@dataclass(frozen=True)
class EngineGeometry:
    """Immutable physical constants of the engine.

    Attributes:
        bore: Cylinder bore (m).
        stroke: Piston stroke (m).
        rod_length: Connecting rod length (m).
        compression_ratio: Geometric compression ratio [-].
        cylinders: Number of cylinders.
        mean_effective_pressure: Brake mean effective pressure (Pa).
    """

    bore: float = 0.086
    stroke: float = 0.086
    rod_length: float = 0.143
    compression_ratio: float = 11.0
    cylinders: int = 3
    mean_effective_pressure: float = 1.0e6

    def __post_init__(self) -> None:
        if self.bore <= 0 or self.stroke <= 0:
            raise ValueError(f"bore and stroke must be positive, got {self.bore}, {self.stroke}")
        if self.compression_ratio <= 1.0:
            raise ValueError(f"compression_ratio must exceed 1, got {self.compression_ratio}")
        if self.cylinders < 1:
            raise ValueError(f"cylinders must be >= 1, got {self.cylinders}")


@dataclass(frozen=True)
class PerformanceMetrics:
    """Derived performance figures for one engine state.

    Attributes:
        displacement: Swept volume of all cylinders (m³).
        rod_stroke_ratio: Rod length / stroke [-].
        piston_speed: Mean piston speed (m/s).
        power: Power output (kW).
        torque: Torque (Nm).
        thermal_efficiency: Thermal efficiency [-].
        volumetric_efficiency: Volumetric efficiency [-], in [0.7, 1.0].
        fuel_consumption: Fuel flow (kg/h, simplified).
        bsfc: Brake-specific fuel consumption (g/kWh, simplified).
        nox: NOx emissions (g/kWh, simplified).
        co2: CO2 emissions (simplified).
    """

    displacement: float = 0.0
    rod_stroke_ratio: float = 0.0
    piston_speed: float = 0.0
    power: float = 0.0
    torque: float = 0.0
    thermal_efficiency: float = 0.0
    volumetric_efficiency: float = 0.9
    fuel_consumption: float = 0.0
    bsfc: float = 0.0
    nox: float = 0.5
    co2: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class EngineState:
    """Mutable engine state owned by the simulation.

    rpm, temperature, acceleration and jerk are bounded scalars; the
    simulation clamps them after every mutation. ``metrics`` is only ever
    replaced by a full recomputation.
    """

    geometry: EngineGeometry
    rpm: float
    idle_rpm: float
    max_rpm: float
    temperature: float
    optimal_temperature: float
    acceleration: float = 0.0
    jerk: float = 0.0
    water_injection_active: bool = False
    metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    def __post_init__(self) -> None:
        if self.idle_rpm >= self.max_rpm:
            raise ValueError(f"idle_rpm ({self.idle_rpm}) must be below max_rpm ({self.max_rpm})")


@dataclass(frozen=True)
class DisplaySnapshot:
    """Read-only projection of the simulation for one tick.

    Values are full precision; formatting is left to the renderer.
    """

    tick: int
    sim_time: float
    rpm: float
    idle_rpm: float
    max_rpm: float
    temperature: float
    acceleration: float
    jerk: float
    water_injection_active: bool
    metrics: PerformanceMetrics
    vehicle_speed: float
    gear: int
    gear_count: int
    transmission_mode: TransmissionMode
    active_upgrades: tuple[str, ...] = ()
    shift_message: str = ""
    shift_message_timer: float = 0.0
    status_message: str = ""
    fps: float = 0.0

    @property
    def vehicle_speed_kmh(self) -> float:
        """Vehicle speed in km/h."""
        return self.vehicle_speed * 3.6

    @property
    def shift_message_visible(self) -> bool:
        """Whether the gear-shift notification should be drawn."""
        return bool(self.shift_message) and self.shift_message_timer > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        data = asdict(self)
        data["transmission_mode"] = self.transmission_mode.value
        data["active_upgrades"] = list(self.active_upgrades)
        data["vehicle_speed_kmh"] = self.vehicle_speed_kmh
        # JSON has no inf/nan
        data["fps"] = self.fps if math.isfinite(self.fps) else 0.0
        return data
