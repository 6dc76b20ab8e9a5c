"""Thermo module — performance model and upgrade effects."""

from .performance import compute_performance, performance_curve
from .upgrades import (
    UPGRADE_EFFECTS,
    UnknownUpgradeError,
    UpgradeEffect,
    UpgradeKind,
    UpgradeRegistry,
)

__all__ = [
    "compute_performance",
    "performance_curve",
    "UPGRADE_EFFECTS",
    "UnknownUpgradeError",
    "UpgradeEffect",
    "UpgradeKind",
    "UpgradeRegistry",
]
