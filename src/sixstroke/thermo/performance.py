"""Engine performance model.

Simplified, illustrative formulas mapping the current engine state to
derived metrics. Recomputation runs in a fixed order and later stages read
the outputs of earlier ones, so efficiencies compound rather than being
recomputed from scratch:

    1. base metrics from geometry and rpm
    2. active upgrade factors
    3. fuel, BSFC, CO2 and NOx from power, efficiency and temperature
    4. water injection
    5. temperature-deviation penalty on thermal efficiency
    6. volumetric efficiency clamp
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import replace

import numpy as np

from ..core.constants import (
    CO2_PER_BSFC,
    FUEL_LHV_KJ_PER_KG,
    GAMMA,
    NOX_COEFF,
    NOX_REFERENCE_TEMPERATURE_C,
    TEMPERATURE_PENALTY_PER_C,
    TEMPERATURE_TOLERANCE_C,
    VOLUMETRIC_EFFICIENCY_MAX,
    VOLUMETRIC_EFFICIENCY_MIN,
    WATER_INJECTION_NOX_FACTOR,
    WATER_INJECTION_THERMAL_FACTOR,
)
from ..core.types import EngineGeometry, PerformanceMetrics
from .upgrades import UpgradeKind, apply_upgrade_effects


def displacement(geometry: EngineGeometry) -> float:
    """Total swept volume (m³): π/4 · bore² · stroke · cylinders."""
    return (math.pi / 4.0) * geometry.bore**2 * geometry.stroke * geometry.cylinders


def rod_stroke_ratio(geometry: EngineGeometry) -> float:
    return geometry.rod_length / geometry.stroke


def piston_speed(geometry: EngineGeometry, rpm: float) -> float:
    """Mean piston speed (m/s)."""
    return 2.0 * geometry.stroke * rpm / 60.0


def power_output(geometry: EngineGeometry, rpm: float) -> float:
    """Power (kW) = MEP · displacement · rpm / 120000."""
    return geometry.mean_effective_pressure * displacement(geometry) * rpm / (120.0 * 1000.0)


def torque(power_kw: float, rpm: float) -> float:
    """Torque (Nm) from power (kW) and speed (rpm)."""
    if rpm <= 0:
        return 0.0
    return power_kw * 1000.0 * 60.0 / (2.0 * math.pi * rpm)


def thermal_efficiency(compression_ratio: float, gamma: float = GAMMA) -> float:
    """Otto-cycle approximation: 1 - r^(1 - γ)."""
    return 1.0 - 1.0 / compression_ratio ** (gamma - 1.0)


def base_metrics(
    geometry: EngineGeometry,
    rpm: float,
    previous: PerformanceMetrics | None = None,
) -> PerformanceMetrics:
    """Stage 1: geometry- and rpm-driven metrics.

    Volumetric efficiency and the emission figures are carried over from
    ``previous``; later stages overwrite or compound them.
    """
    previous = previous or PerformanceMetrics()
    power = power_output(geometry, rpm)
    return replace(
        previous,
        displacement=displacement(geometry),
        rod_stroke_ratio=rod_stroke_ratio(geometry),
        piston_speed=piston_speed(geometry, rpm),
        power=power,
        torque=torque(power, rpm),
        thermal_efficiency=thermal_efficiency(geometry.compression_ratio),
    )


def fuel_and_emissions(metrics: PerformanceMetrics, temperature: float) -> PerformanceMetrics:
    """Stage 3: derive fuel flow, BSFC, CO2 and NOx."""
    power = metrics.power
    fuel = power * 3600.0 / (FUEL_LHV_KJ_PER_KG * metrics.thermal_efficiency)
    bsfc = fuel * 3600.0 / power if power > 0 else 0.0
    nox = NOX_COEFF * power * (1.0 + (temperature - NOX_REFERENCE_TEMPERATURE_C) / 100.0)
    return replace(
        metrics,
        fuel_consumption=fuel,
        bsfc=bsfc,
        co2=bsfc * CO2_PER_BSFC,
        nox=nox,
    )


def water_injection(metrics: PerformanceMetrics) -> PerformanceMetrics:
    """Stage 4: water injection raises efficiency and cuts NOx."""
    return replace(
        metrics,
        thermal_efficiency=metrics.thermal_efficiency * WATER_INJECTION_THERMAL_FACTOR,
        nox=metrics.nox * WATER_INJECTION_NOX_FACTOR,
    )


def temperature_penalty(
    metrics: PerformanceMetrics, temperature: float, optimal_temperature: float
) -> PerformanceMetrics:
    """Stage 5: penalise thermal efficiency away from the optimal temperature."""
    deviation = abs(temperature - optimal_temperature)
    if deviation <= TEMPERATURE_TOLERANCE_C:
        return metrics
    return replace(
        metrics,
        thermal_efficiency=metrics.thermal_efficiency * (1.0 - TEMPERATURE_PENALTY_PER_C * deviation),
    )


def compute_performance(
    geometry: EngineGeometry,
    rpm: float,
    temperature: float,
    optimal_temperature: float,
    upgrades: Iterable[UpgradeKind] = (),
    water_injection_active: bool = False,
    previous: PerformanceMetrics | None = None,
) -> PerformanceMetrics:
    """Full performance recomputation.

    Args:
        geometry: Engine physical constants.
        rpm: Engine speed (rpm).
        temperature: Engine temperature (°C).
        optimal_temperature: Temperature with no efficiency penalty (°C).
        upgrades: Active upgrades, applied in the given order.
        water_injection_active: Whether water injection is on.
        previous: Last computed metrics (volumetric efficiency carries over).

    Returns:
        New PerformanceMetrics.
    """
    metrics = base_metrics(geometry, rpm, previous)
    metrics = apply_upgrade_effects(metrics, upgrades)
    # Fuel and NOx factors from upgrades are superseded here.
    metrics = fuel_and_emissions(metrics, temperature)
    if water_injection_active:
        metrics = water_injection(metrics)
    metrics = temperature_penalty(metrics, temperature, optimal_temperature)

    ve = float(
        np.clip(metrics.volumetric_efficiency, VOLUMETRIC_EFFICIENCY_MIN, VOLUMETRIC_EFFICIENCY_MAX)
    )
    return replace(metrics, volumetric_efficiency=ve)


def performance_curve(
    geometry: EngineGeometry,
    rpm: np.ndarray,
    temperature: float,
    optimal_temperature: float,
    upgrades: Iterable[UpgradeKind] = (),
    water_injection_active: bool = False,
) -> dict[str, np.ndarray]:
    """Evaluate the model over an rpm sweep, starting each point fresh.

    Returns:
        Dict of metric name -> array aligned with ``rpm``.
    """
    upgrades = tuple(upgrades)
    rows = [
        compute_performance(
            geometry,
            float(r),
            temperature,
            optimal_temperature,
            upgrades,
            water_injection_active,
        ).to_dict()
        for r in np.asarray(rpm, dtype=np.float64)
    ]
    keys = PerformanceMetrics().to_dict().keys()
    return {k: np.array([row[k] for row in rows], dtype=np.float64) for k in keys}
