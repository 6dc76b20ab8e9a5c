"""Engine upgrades as a table of multiplicative effects.

Each upgrade kind maps to an immutable :class:`UpgradeEffect`. Effects are
pure: ``effect.apply(metrics)`` returns adjusted metrics and never touches
the engine state. The registry only tracks which kinds are active.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from ..core.types import PerformanceMetrics


class UnknownUpgradeError(ValueError):
    """Raised when an upgrade identifier is not in the registry."""

    def __init__(self, upgrade_id: str) -> None:
        super().__init__(f"Unknown upgrade: {upgrade_id}")
        self.upgrade_id = upgrade_id


class UpgradeKind(str, Enum):
    """Known upgrade identifiers."""

    ADVANCED_MATERIALS = "advanced_materials"
    CERAMIC_COATING = "ceramic_coating"
    CYLINDER_DEACTIVATION = "cylinder_deactivation"
    DIRECT_INJECTION = "direct_injection"
    ENHANCED_ECU = "enhanced_ecu"
    EXHAUST_GAS_RECIRCULATION = "exhaust_gas_recirculation"
    SMART_COOLING = "smart_cooling"
    TURBOCHARGER = "turbocharger"
    VARIABLE_COMPRESSION = "variable_compression"
    VARIABLE_VALVE_TIMING = "variable_valve_timing"
    WASTE_HEAT_RECOVERY = "waste_heat_recovery"

    @classmethod
    def parse(cls, upgrade_id: str) -> UpgradeKind:
        """Look up a kind by identifier.

        Raises:
            UnknownUpgradeError: If the identifier is not known.
        """
        try:
            return cls(upgrade_id)
        except ValueError:
            raise UnknownUpgradeError(upgrade_id) from None


@dataclass(frozen=True)
class UpgradeEffect:
    """Multiplicative adjustments applied during performance recomputation.

    Attributes:
        power: Factor on power output.
        fuel_consumption: Factor on fuel consumption.
        thermal_efficiency: Factor on thermal efficiency.
        volumetric_efficiency: Factor on volumetric efficiency.
        nox: Factor on NOx emissions.
        temperature_offset: One-time engine temperature change on activation (°C).
    """

    power: float = 1.0
    fuel_consumption: float = 1.0
    thermal_efficiency: float = 1.0
    volumetric_efficiency: float = 1.0
    nox: float = 1.0
    temperature_offset: float = 0.0

    def apply(self, metrics: PerformanceMetrics) -> PerformanceMetrics:
        """Return metrics with this effect's factors applied."""
        return replace(
            metrics,
            power=metrics.power * self.power,
            fuel_consumption=metrics.fuel_consumption * self.fuel_consumption,
            thermal_efficiency=metrics.thermal_efficiency * self.thermal_efficiency,
            volumetric_efficiency=metrics.volumetric_efficiency * self.volumetric_efficiency,
            nox=metrics.nox * self.nox,
        )


UPGRADE_EFFECTS: dict[UpgradeKind, UpgradeEffect] = {
    UpgradeKind.ADVANCED_MATERIALS: UpgradeEffect(power=1.05),
    UpgradeKind.CERAMIC_COATING: UpgradeEffect(thermal_efficiency=1.03, temperature_offset=-5.0),
    UpgradeKind.CYLINDER_DEACTIVATION: UpgradeEffect(fuel_consumption=0.92),
    UpgradeKind.DIRECT_INJECTION: UpgradeEffect(fuel_consumption=0.9, thermal_efficiency=1.05),
    UpgradeKind.ENHANCED_ECU: UpgradeEffect(fuel_consumption=0.95, power=1.05),
    UpgradeKind.EXHAUST_GAS_RECIRCULATION: UpgradeEffect(nox=0.7),
    UpgradeKind.SMART_COOLING: UpgradeEffect(thermal_efficiency=1.02),
    UpgradeKind.TURBOCHARGER: UpgradeEffect(power=1.2, volumetric_efficiency=1.15),
    UpgradeKind.VARIABLE_COMPRESSION: UpgradeEffect(thermal_efficiency=1.08, fuel_consumption=0.93),
    UpgradeKind.VARIABLE_VALVE_TIMING: UpgradeEffect(volumetric_efficiency=1.1, fuel_consumption=0.95),
    UpgradeKind.WASTE_HEAT_RECOVERY: UpgradeEffect(thermal_efficiency=1.05),
}


def apply_upgrade_effects(
    metrics: PerformanceMetrics, upgrades: Iterable[UpgradeKind]
) -> PerformanceMetrics:
    """Apply the effect of every given upgrade, in the given order."""
    for kind in upgrades:
        metrics = UPGRADE_EFFECTS[kind].apply(metrics)
    return metrics


class UpgradeRegistry:
    """Activation flags for every known upgrade.

    Created fully populated with all upgrades inactive. Activation is
    one-way; there is no removal.
    """

    def __init__(self) -> None:
        self._flags: dict[UpgradeKind, bool] = {
            kind: False for kind in sorted(UpgradeKind, key=lambda k: k.value)
        }

    def activate(self, upgrade_id: str | UpgradeKind) -> UpgradeKind:
        """Mark an upgrade active.

        Args:
            upgrade_id: Upgrade identifier or kind.

        Returns:
            The activated kind.

        Raises:
            UnknownUpgradeError: If the identifier is not known. State is unchanged.
        """
        kind = upgrade_id if isinstance(upgrade_id, UpgradeKind) else UpgradeKind.parse(upgrade_id)
        self._flags[kind] = True
        return kind

    def is_active(self, kind: UpgradeKind) -> bool:
        return self._flags[kind]

    def active(self) -> tuple[UpgradeKind, ...]:
        """Active kinds in iteration order (lexical by identifier)."""
        return tuple(kind for kind, on in self._flags.items() if on)

    def known(self) -> tuple[UpgradeKind, ...]:
        return tuple(self._flags)

    def __contains__(self, upgrade_id: object) -> bool:
        # str-valued enum: plain identifiers hash and compare equal to their kind
        return upgrade_id in self._flags

    def __len__(self) -> int:
        return len(self._flags)
