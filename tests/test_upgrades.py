"""Test upgrade registry and effect table."""

import pytest

from sixstroke.core.types import EngineGeometry
from sixstroke.thermo.performance import compute_performance
from sixstroke.thermo.upgrades import (
    UPGRADE_EFFECTS,
    UnknownUpgradeError,
    UpgradeKind,
    UpgradeRegistry,
)

GEOM = EngineGeometry()


def test_registry_starts_fully_populated_inactive():
    reg = UpgradeRegistry()
    assert len(reg) == len(UpgradeKind) == 11
    assert reg.active() == ()
    assert set(reg.known()) == set(UpgradeKind)


def test_activate_known_identifier():
    reg = UpgradeRegistry()
    kind = reg.activate("turbocharger")
    assert kind is UpgradeKind.TURBOCHARGER
    assert reg.is_active(UpgradeKind.TURBOCHARGER)
    assert "turbocharger" in reg


def test_activate_unknown_identifier_rejected():
    reg = UpgradeRegistry()
    with pytest.raises(UnknownUpgradeError, match="Unknown upgrade: nitrous"):
        reg.activate("nitrous")
    assert reg.active() == ()
    assert "nitrous" not in reg


def test_active_order_is_lexical():
    reg = UpgradeRegistry()
    for upgrade_id in ["waste_heat_recovery", "advanced_materials", "turbocharger"]:
        reg.activate(upgrade_id)
    assert [k.value for k in reg.active()] == [
        "advanced_materials",
        "turbocharger",
        "waste_heat_recovery",
    ]


def test_every_kind_has_an_effect():
    assert set(UPGRADE_EFFECTS) == set(UpgradeKind)


def test_turbocharger_scales_power_only():
    """Test turbocharger: power x1.2, torque and efficiency untouched."""
    base = compute_performance(GEOM, 3000.0, 90.0, 90.0)
    turbo = compute_performance(GEOM, 3000.0, 90.0, 90.0, [UpgradeKind.TURBOCHARGER])

    assert turbo.power == pytest.approx(base.power * 1.2)
    assert turbo.torque == base.torque
    assert turbo.thermal_efficiency == base.thermal_efficiency
    assert turbo.displacement == base.displacement


@pytest.mark.parametrize(
    "kind, factor",
    [
        (UpgradeKind.WASTE_HEAT_RECOVERY, 1.05),
        (UpgradeKind.SMART_COOLING, 1.02),
        (UpgradeKind.VARIABLE_COMPRESSION, 1.08),
        (UpgradeKind.DIRECT_INJECTION, 1.05),
        (UpgradeKind.CERAMIC_COATING, 1.03),
    ],
)
def test_thermal_upgrades_scale_efficiency(kind, factor):
    base = compute_performance(GEOM, 3000.0, 90.0, 90.0)
    up = compute_performance(GEOM, 3000.0, 90.0, 90.0, [kind])

    assert up.thermal_efficiency == pytest.approx(base.thermal_efficiency * factor)
    assert up.power == base.power


@pytest.mark.parametrize("kind", [UpgradeKind.ADVANCED_MATERIALS, UpgradeKind.ENHANCED_ECU])
def test_power_upgrades(kind):
    base = compute_performance(GEOM, 3000.0, 90.0, 90.0)
    up = compute_performance(GEOM, 3000.0, 90.0, 90.0, [kind])
    assert up.power == pytest.approx(base.power * 1.05)


def test_effect_order_does_not_matter():
    kinds = [UpgradeKind.TURBOCHARGER, UpgradeKind.DIRECT_INJECTION, UpgradeKind.WASTE_HEAT_RECOVERY]
    a = compute_performance(GEOM, 3000.0, 90.0, 90.0, kinds)
    b = compute_performance(GEOM, 3000.0, 90.0, 90.0, list(reversed(kinds)))
    assert a.power == pytest.approx(b.power)
    assert a.thermal_efficiency == pytest.approx(b.thermal_efficiency)
