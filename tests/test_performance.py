"""Test the performance model and its recomputation order."""

import math

import numpy as np
import pytest

from sixstroke.core.types import EngineGeometry, PerformanceMetrics
from sixstroke.thermo.performance import (
    base_metrics,
    compute_performance,
    displacement,
    performance_curve,
    thermal_efficiency,
    torque,
)
from sixstroke.thermo.upgrades import UpgradeKind

GEOM = EngineGeometry()


def test_displacement_formula():
    expected = math.pi / 4 * 0.086**2 * 0.086 * 3
    assert displacement(GEOM) == pytest.approx(expected)


def test_otto_efficiency():
    """Test thermal efficiency 1 - r^-0.4 at compression ratio 11."""
    assert thermal_efficiency(11.0) == pytest.approx(1.0 - 11.0**-0.4)
    assert 0.61 < thermal_efficiency(11.0) < 0.62


def test_torque_power_consistency():
    m = base_metrics(GEOM, 3000.0)
    omega = 3000.0 * 2 * math.pi / 60
    assert m.torque * omega / 1000.0 == pytest.approx(m.power)
    assert torque(10.0, 0.0) == 0.0


def test_power_formula():
    m = base_metrics(GEOM, 3000.0)
    assert m.power == pytest.approx(1.0e6 * displacement(GEOM) * 3000.0 / 120000.0)
    assert m.piston_speed == pytest.approx(2 * 0.086 * 3000.0 / 60.0)
    assert m.rod_stroke_ratio == pytest.approx(0.143 / 0.086)


def test_fresh_state_efficiency_unadjusted():
    m = compute_performance(GEOM, 1000.0, 90.0, 90.0)
    assert m.thermal_efficiency == pytest.approx(1.0 - 11.0**-0.4)


def test_derived_fuel_and_emissions():
    m = compute_performance(GEOM, 2500.0, 95.0, 90.0)
    fuel = m.power * 3600 / (43000 * m.thermal_efficiency)
    assert m.fuel_consumption == pytest.approx(fuel)
    assert m.bsfc == pytest.approx(fuel * 3600 / m.power)
    assert m.co2 == pytest.approx(m.bsfc * 3.2)
    assert m.nox == pytest.approx(0.01 * m.power * (1 + 5.0 / 100))


@pytest.mark.parametrize("temperature", [90.0, 105.0])
def test_water_injection_factors(temperature):
    """Test water injection: thermal x1.1, NOx x0.8 vs. identical dry run."""
    dry = compute_performance(GEOM, 3000.0, temperature, 90.0)
    wet = compute_performance(GEOM, 3000.0, temperature, 90.0, water_injection_active=True)

    assert wet.thermal_efficiency == pytest.approx(dry.thermal_efficiency * 1.1)
    assert wet.nox == pytest.approx(dry.nox * 0.8)
    assert wet.power == dry.power
    assert wet.fuel_consumption == dry.fuel_consumption


def test_temperature_penalty_only_beyond_tolerance():
    ref = compute_performance(GEOM, 3000.0, 90.0, 90.0)
    within = compute_performance(GEOM, 3000.0, 100.0, 90.0)
    beyond = compute_performance(GEOM, 3000.0, 105.0, 90.0)

    assert within.thermal_efficiency == pytest.approx(ref.thermal_efficiency)
    assert beyond.thermal_efficiency == pytest.approx(ref.thermal_efficiency * (1 - 0.001 * 15))


def test_penalty_applies_after_fuel_derivation():
    """Fuel is derived before the penalty, so it uses the unpenalised efficiency."""
    hot = compute_performance(GEOM, 3000.0, 105.0, 90.0)
    unpenalised = hot.thermal_efficiency / (1 - 0.001 * 15)
    assert hot.fuel_consumption == pytest.approx(hot.power * 3600 / (43000 * unpenalised))


def test_volumetric_efficiency_compounds_and_clamps():
    previous = PerformanceMetrics(volumetric_efficiency=0.9)
    m = compute_performance(GEOM, 3000.0, 90.0, 90.0, [UpgradeKind.VARIABLE_VALVE_TIMING], previous=previous)
    assert m.volumetric_efficiency == pytest.approx(0.99)

    m = compute_performance(GEOM, 3000.0, 90.0, 90.0, [UpgradeKind.VARIABLE_VALVE_TIMING], previous=m)
    assert m.volumetric_efficiency == 1.0

    low = compute_performance(GEOM, 3000.0, 90.0, 90.0, previous=PerformanceMetrics(volumetric_efficiency=0.2))
    assert low.volumetric_efficiency == 0.7


def test_performance_curve_shapes():
    rpm = np.linspace(800, 6000, 7)
    curve = performance_curve(GEOM, rpm, 90.0, 90.0)

    assert set(curve) == set(PerformanceMetrics().to_dict())
    assert all(v.shape == (7,) for v in curve.values())
    assert np.all(np.diff(curve["power"]) > 0)
    np.testing.assert_allclose(curve["displacement"], displacement(GEOM))
