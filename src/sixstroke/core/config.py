"""Configuration management with pydantic and YAML support."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    FPS_WINDOW,
    NOTIFICATION_SECONDS,
    TARGET_TICK_RATE_HZ,
    TEMPERATURE_MAX_C,
    TEMPERATURE_MIN_C,
)
from .types import EngineGeometry


class EngineConfig(BaseModel):
    """Engine geometry and initial operating point."""

    bore: float = Field(default=0.086, gt=0.0, le=0.5)
    stroke: float = Field(default=0.086, gt=0.0, le=0.5)
    rod_length: float = Field(default=0.143, gt=0.0, le=1.0)
    compression_ratio: float = Field(default=11.0, gt=1.0, le=25.0)
    cylinders: int = Field(default=3, ge=1, le=16)
    mean_effective_pressure: float = Field(default=1.0e6, gt=0.0)
    idle_rpm: float = Field(default=800.0, gt=0.0)
    max_rpm: float = Field(default=6000.0, gt=0.0)
    initial_rpm: float = Field(default=1000.0, gt=0.0)
    initial_temperature: float = Field(default=90.0)
    optimal_temperature: float = Field(default=90.0)
    volumetric_efficiency: float = Field(default=0.9, ge=0.7, le=1.0)

    @model_validator(mode="after")
    def _check_ranges(self) -> EngineConfig:
        if self.idle_rpm >= self.max_rpm:
            raise ValueError(f"idle_rpm ({self.idle_rpm}) must be below max_rpm ({self.max_rpm})")
        if not self.idle_rpm <= self.initial_rpm <= self.max_rpm:
            raise ValueError(
                f"initial_rpm ({self.initial_rpm}) must lie in [{self.idle_rpm}, {self.max_rpm}]"
            )
        if not TEMPERATURE_MIN_C <= self.initial_temperature <= TEMPERATURE_MAX_C:
            raise ValueError(
                f"initial_temperature ({self.initial_temperature}) must lie in "
                f"[{TEMPERATURE_MIN_C}, {TEMPERATURE_MAX_C}]"
            )
        return self

    def geometry(self) -> EngineGeometry:
        """Build the immutable engine geometry."""
        return EngineGeometry(
            bore=self.bore,
            stroke=self.stroke,
            rod_length=self.rod_length,
            compression_ratio=self.compression_ratio,
            cylinders=self.cylinders,
            mean_effective_pressure=self.mean_effective_pressure,
        )


class GearboxConfig(BaseModel):
    """Gearbox ratios and automatic shift thresholds."""

    ratios: list[float] = Field(default_factory=lambda: [3.42, 2.14, 1.45, 1.0, 0.83])
    upshift_rpm: float = Field(default=4000.0, gt=0.0)
    downshift_rpm: float = Field(default=2000.0, gt=0.0)
    shift_rpm_swing: float = Field(default=1500.0, ge=0.0)

    @field_validator("ratios")
    @classmethod
    def _check_ratios(cls, v: list[float]) -> list[float]:
        if not v:
            raise ValueError("gearbox needs at least one ratio")
        if any(r <= 0 for r in v):
            raise ValueError(f"gear ratios must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def _check_thresholds(self) -> GearboxConfig:
        if self.downshift_rpm >= self.upshift_rpm:
            raise ValueError(
                f"downshift_rpm ({self.downshift_rpm}) must be below upshift_rpm ({self.upshift_rpm})"
            )
        return self


class VehicleConfig(BaseModel):
    """Driveline downstream of the gearbox."""

    wheel_radius: float = Field(default=0.3175, gt=0.0, le=2.0)
    final_drive_ratio: float = Field(default=3.73, gt=0.0, le=20.0)


class DynamicsConfig(BaseModel):
    """Per-tick integration and pedal response settings."""

    jerk_noise: int = Field(default=100, ge=0)
    jerk_limit: float = Field(default=500.0, gt=0.0)
    acceleration_limit: float = Field(default=50.0, gt=0.0)
    rpm_gain: float = Field(default=10.0, ge=0.0)
    warmup_rate: float = Field(default=0.5, ge=0.0)
    cooldown_rate: float = Field(default=0.2, ge=0.0)
    water_injection_toggle_probability: float = Field(default=0.005, ge=0.0, le=1.0)
    pedal_rpm_step: float = Field(default=100.0, ge=0.0)
    pedal_warmup: float = Field(default=0.5, ge=0.0)
    pedal_cooldown: float = Field(default=0.2, ge=0.0)
    notification_seconds: float = Field(default=NOTIFICATION_SECONDS, gt=0.0)


class SimulationConfig(BaseModel):
    """Loop and startup settings."""

    tick_rate: float = Field(default=TARGET_TICK_RATE_HZ, gt=0.0, le=1000.0)
    fps_window: int = Field(default=FPS_WINDOW, ge=1, le=10000)
    seed: int | None = Field(default=None, ge=0)
    upgrades: list[str] = Field(default_factory=list)
    random_upgrades: bool = False


class SixStrokeConfig(BaseModel):
    """Root configuration object."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    gearbox: GearboxConfig = Field(default_factory=GearboxConfig)
    vehicle: VehicleConfig = Field(default_factory=VehicleConfig)
    dynamics: DynamicsConfig = Field(default_factory=DynamicsConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)


def load_config(path: str | Path) -> SixStrokeConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed SixStrokeConfig object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return SixStrokeConfig.model_validate(data or {})


def save_config(config: SixStrokeConfig, path: str | Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration to save.
        path: Output path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False)


def default_config() -> SixStrokeConfig:
    """Return default configuration."""
    return SixStrokeConfig()


def merge_config(base: SixStrokeConfig, overrides: dict[str, Any]) -> SixStrokeConfig:
    """Merge overrides into base configuration.

    Args:
        base: Base configuration.
        overrides: Dictionary of override values.

    Returns:
        New configuration with overrides applied.
    """
    base_dict = base.model_dump()

    def deep_merge(d1: dict, d2: dict) -> dict:
        result = d1.copy()
        for k, v in d2.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    merged = deep_merge(base_dict, overrides)
    return SixStrokeConfig.model_validate(merged)
