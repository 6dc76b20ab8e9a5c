"""Engine simulation — the per-tick state machine.

Interface:
    sim.update(dt, command) -> DisplaySnapshot

Flow per tick:
    1. apply the polled control command
    2. integrate jerk -> acceleration -> rpm (random jerk perturbation)
    3. warm up / cool down
    4. random water-injection toggle
    5. automatic gear selection (Automatic mode only)
    6. recompute performance and vehicle speed
    7. age or refresh the gear-shift notification
"""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np

from ..core.config import SixStrokeConfig, default_config
from ..core.constants import (
    PEDAL_REFERENCE_TEMPERATURE_C,
    TEMPERATURE_MAX_C,
    TEMPERATURE_MIN_C,
)
from ..core.logging import get_logger
from ..core.types import (
    Command,
    DisplaySnapshot,
    EngineState,
    PerformanceMetrics,
    TransmissionMode,
)
from ..gear.gearbox import Gearbox
from ..thermo.performance import compute_performance
from ..thermo.upgrades import UPGRADE_EFFECTS, UnknownUpgradeError, UpgradeKind, UpgradeRegistry

logger = get_logger(__name__)


def _clamp(value: float, lo: float, hi: float) -> float:
    return float(np.clip(value, lo, hi))


class EngineSimulation:
    """Owns the engine state, gearbox and upgrades and advances them per tick.

    Args:
        config: Simulation configuration (defaults if None).
        rng: Random source for the jerk perturbation and water-injection
            toggle. Seeded from ``config.simulation.seed`` if None.
    """

    def __init__(
        self,
        config: SixStrokeConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or default_config()
        eng = self.config.engine
        self._dyn = self.config.dynamics
        self._gear_cfg = self.config.gearbox
        self._vehicle = self.config.vehicle

        self._rng = rng if rng is not None else np.random.default_rng(self.config.simulation.seed)
        self.state = EngineState(
            geometry=eng.geometry(),
            rpm=eng.initial_rpm,
            idle_rpm=eng.idle_rpm,
            max_rpm=eng.max_rpm,
            temperature=eng.initial_temperature,
            optimal_temperature=eng.optimal_temperature,
            metrics=PerformanceMetrics(volumetric_efficiency=eng.volumetric_efficiency),
        )
        self.gearbox = Gearbox(self._gear_cfg.ratios)
        self.upgrades = UpgradeRegistry()
        self.mode = TransmissionMode.AUTOMATIC

        self.vehicle_speed = 0.0
        self.shift_message = ""
        self.shift_message_timer = 0.0
        self.status_message = ""
        self.tick_count = 0
        self.sim_time = 0.0

        self.recompute()

    # ------------------------------------------------------------------
    # Performance
    # ------------------------------------------------------------------

    def recompute(self) -> PerformanceMetrics:
        """Recompute performance metrics and vehicle speed from the current state."""
        s = self.state
        s.metrics = compute_performance(
            s.geometry,
            s.rpm,
            s.temperature,
            s.optimal_temperature,
            upgrades=self.upgrades.active(),
            water_injection_active=s.water_injection_active,
            previous=s.metrics,
        )
        self.vehicle_speed = self._compute_vehicle_speed()
        return s.metrics

    def _compute_vehicle_speed(self) -> float:
        """Vehicle speed (m/s) from engine rpm through gearbox and final drive."""
        wheel_rpm = self.state.rpm / (self.gearbox.current_ratio() * self._vehicle.final_drive_ratio)
        return wheel_rpm * 2.0 * math.pi * self._vehicle.wheel_radius / 60.0

    # ------------------------------------------------------------------
    # Upgrades and water injection
    # ------------------------------------------------------------------

    def apply_upgrade(self, upgrade_id: str) -> bool:
        """Activate an upgrade and recompute performance.

        Unknown identifiers leave the state untouched and are reported
        through the status message.

        Returns:
            True if the upgrade is known and now active.
        """
        try:
            kind = UpgradeKind.parse(upgrade_id)
        except UnknownUpgradeError as exc:
            self.status_message = str(exc)
            logger.warn("unknown upgrade", upgrade=upgrade_id)
            return False

        newly_active = not self.upgrades.is_active(kind)
        self.upgrades.activate(kind)

        offset = UPGRADE_EFFECTS[kind].temperature_offset
        if newly_active and offset:
            self.state.temperature = _clamp(
                self.state.temperature + offset, TEMPERATURE_MIN_C, TEMPERATURE_MAX_C
            )

        self.status_message = f"{kind.value} applied"
        logger.info("upgrade applied", upgrade=kind.value)
        self.recompute()
        return True

    def apply_upgrades(self, upgrade_ids: Iterable[str]) -> list[str]:
        """Apply several upgrades; returns the identifiers that were rejected."""
        return [u for u in upgrade_ids if not self.apply_upgrade(u)]

    def set_water_injection(self, active: bool) -> None:
        self.state.water_injection_active = bool(active)
        self.status_message = "Water injection " + ("activated" if active else "deactivated")
        logger.info("water injection", active=bool(active))
        self.recompute()

    # ------------------------------------------------------------------
    # Transmission
    # ------------------------------------------------------------------

    def toggle_transmission_mode(self) -> TransmissionMode:
        self.mode = self.mode.toggled()
        self.status_message = f"Transmission mode switched to {self.mode.value}"
        logger.info("transmission mode", mode=self.mode.value)
        return self.mode

    def _notify_shift(self, message: str) -> None:
        self.shift_message = message
        self.shift_message_timer = self._dyn.notification_seconds
        logger.debug("gear shift", gear=self.gearbox.current_gear(), text=message)

    def manual_upshift(self) -> bool:
        """Shift up in Manual mode.

        Returns:
            True if the gear changed. Ignored outside Manual mode.
        """
        if self.mode is not TransmissionMode.MANUAL:
            logger.debug("manual upshift ignored", mode=self.mode.value)
            return False
        if self.gearbox.shift_up():
            self.state.rpm = max(self.state.rpm - self._gear_cfg.shift_rpm_swing, self.state.idle_rpm)
            self._notify_shift(f"Manually shifted up to gear {self.gearbox.current_gear()}")
            self.recompute()
            return True
        self._notify_shift("Already in highest gear")
        return False

    def manual_downshift(self) -> bool:
        """Shift down in Manual mode.

        Returns:
            True if the gear changed. Ignored outside Manual mode.
        """
        if self.mode is not TransmissionMode.MANUAL:
            logger.debug("manual downshift ignored", mode=self.mode.value)
            return False
        if self.gearbox.shift_down():
            self.state.rpm = min(self.state.rpm + self._gear_cfg.shift_rpm_swing, self.state.max_rpm)
            self._notify_shift(f"Manually shifted down to gear {self.gearbox.current_gear()}")
            self.recompute()
            return True
        self._notify_shift("Already in lowest gear")
        return False

    def _auto_upshift(self) -> bool:
        if self.state.rpm > self._gear_cfg.upshift_rpm and not self.gearbox.is_top():
            self.gearbox.shift_up()
            self.state.rpm -= self._gear_cfg.shift_rpm_swing
            return True
        return False

    def _auto_downshift(self) -> bool:
        if self.state.rpm < self._gear_cfg.downshift_rpm and not self.gearbox.is_bottom():
            self.gearbox.shift_down()
            self.state.rpm += self._gear_cfg.shift_rpm_swing
            return True
        return False

    def _clamp_rpm(self) -> None:
        s = self.state
        s.rpm = _clamp(s.rpm, s.idle_rpm, s.max_rpm)

    # ------------------------------------------------------------------
    # Pedal
    # ------------------------------------------------------------------

    def accelerate(self) -> None:
        """Step rpm up and warm the engine; may trigger an automatic upshift."""
        s = self.state
        s.rpm = min(s.rpm + self._dyn.pedal_rpm_step, s.max_rpm)
        warmup = self._dyn.pedal_warmup * (1.0 - (s.temperature - PEDAL_REFERENCE_TEMPERATURE_C) / 100.0)
        s.temperature = min(s.temperature + max(0.0, warmup), TEMPERATURE_MAX_C)

        if self.mode is TransmissionMode.AUTOMATIC and self._auto_upshift():
            self._clamp_rpm()
            self._notify_shift(f"Shifted to gear {self.gearbox.current_gear()}")
        self.recompute()

    def decelerate(self) -> None:
        """Step rpm down and cool the engine; may trigger an automatic downshift."""
        s = self.state
        s.rpm = max(s.rpm - self._dyn.pedal_rpm_step, s.idle_rpm)
        cooldown = self._dyn.pedal_cooldown * ((s.temperature - PEDAL_REFERENCE_TEMPERATURE_C) / 100.0)
        s.temperature = max(s.temperature - max(0.0, cooldown), TEMPERATURE_MIN_C)

        if self.mode is TransmissionMode.AUTOMATIC and self._auto_downshift():
            self._clamp_rpm()
            self._notify_shift(f"Shifted to gear {self.gearbox.current_gear()}")
        self.recompute()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def handle(self, command: Command) -> None:
        """Dispatch one control command."""
        dispatch = {
            Command.ACCELERATE: self.accelerate,
            Command.DECELERATE: self.decelerate,
            Command.UPSHIFT: self.manual_upshift,
            Command.DOWNSHIFT: self.manual_downshift,
            Command.TOGGLE_MODE: self.toggle_transmission_mode,
        }
        fn = dispatch.get(command)
        if fn is not None:
            fn()

    def _integrate(self, dt: float) -> None:
        s = self.state
        dyn = self._dyn

        noise = int(self._rng.integers(-dyn.jerk_noise, dyn.jerk_noise + 1))
        s.jerk = _clamp(s.jerk + noise * dt, -dyn.jerk_limit, dyn.jerk_limit)
        s.acceleration = _clamp(
            s.acceleration + s.jerk * dt, -dyn.acceleration_limit, dyn.acceleration_limit
        )
        s.rpm += s.acceleration * dt * dyn.rpm_gain
        self._clamp_rpm()

        rate = dyn.warmup_rate if s.acceleration > 0 else -dyn.cooldown_rate
        s.temperature = _clamp(s.temperature + rate * dt, TEMPERATURE_MIN_C, TEMPERATURE_MAX_C)

    def update(self, dt: float, command: Command = Command.NONE, fps: float = 0.0) -> DisplaySnapshot:
        """Advance the simulation by one tick.

        Args:
            dt: Elapsed time since the previous tick (s).
            command: Control command polled for this tick.
            fps: Frame rate to report in the snapshot.

        Returns:
            DisplaySnapshot of the post-tick state.
        """
        dt = max(float(dt), 0.0)
        self.handle(command)
        self._integrate(dt)

        if self._rng.random() < self._dyn.water_injection_toggle_probability:
            self.set_water_injection(not self.state.water_injection_active)

        previous_gear = self.gearbox.current_gear()
        if self.mode is TransmissionMode.AUTOMATIC:
            if not self._auto_upshift():
                self._auto_downshift()
        self._clamp_rpm()

        self.recompute()

        if self.gearbox.current_gear() != previous_gear:
            self._notify_shift(f"Shifted to gear {self.gearbox.current_gear()}")
        elif self.shift_message_timer > 0:
            self.shift_message_timer -= dt
            if self.shift_message_timer <= 0:
                self.shift_message = ""

        self.tick_count += 1
        self.sim_time += dt
        return self.snapshot(fps)

    def snapshot(self, fps: float = 0.0) -> DisplaySnapshot:
        """Immutable projection of the current state."""
        s = self.state
        return DisplaySnapshot(
            tick=self.tick_count,
            sim_time=self.sim_time,
            rpm=s.rpm,
            idle_rpm=s.idle_rpm,
            max_rpm=s.max_rpm,
            temperature=s.temperature,
            acceleration=s.acceleration,
            jerk=s.jerk,
            water_injection_active=s.water_injection_active,
            metrics=s.metrics,
            vehicle_speed=self.vehicle_speed,
            gear=self.gearbox.current_gear(),
            gear_count=self.gearbox.gear_count,
            transmission_mode=self.mode,
            active_upgrades=tuple(k.value for k in self.upgrades.active()),
            shift_message=self.shift_message,
            shift_message_timer=self.shift_message_timer,
            status_message=self.status_message,
            fps=fps,
        )
