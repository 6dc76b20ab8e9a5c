"""Core constants for sixstroke.

This module defines system-wide invariants such as:
- Bounds that every simulation tick must respect
- Fuel and emission model coefficients
- Notification timing
"""

from __future__ import annotations

# Engine state bounds (clamped, never raised)
TEMPERATURE_MIN_C = 85.0
TEMPERATURE_MAX_C = 110.0
VOLUMETRIC_EFFICIENCY_MIN = 0.7
VOLUMETRIC_EFFICIENCY_MAX = 1.0

# Otto-cycle approximation
GAMMA = 1.4  # Ratio of specific heats (air)

# Fuel model
FUEL_LHV_KJ_PER_KG = 43000.0  # Gasoline lower heating value
CO2_PER_BSFC = 3.2  # g CO2 per g fuel (approximate, gasoline)

# NOx model
NOX_COEFF = 0.01
NOX_REFERENCE_TEMPERATURE_C = 90.0

# Water injection
WATER_INJECTION_THERMAL_FACTOR = 1.1
WATER_INJECTION_NOX_FACTOR = 0.8

# Temperature deviation penalty on thermal efficiency
TEMPERATURE_TOLERANCE_C = 10.0
TEMPERATURE_PENALTY_PER_C = 0.001

# Pedal temperature response is scaled around this point
PEDAL_REFERENCE_TEMPERATURE_C = 90.0

# Gear-shift / status notification lifetime (seconds)
NOTIFICATION_SECONDS = 3.0

# Frame clock
FPS_WINDOW = 60
TARGET_TICK_RATE_HZ = 60.0
