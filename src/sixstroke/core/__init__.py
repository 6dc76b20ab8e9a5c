"""Core module — types, configuration, constants, logging."""

from .config import SixStrokeConfig, default_config, load_config
from .types import (
    Command,
    DisplaySnapshot,
    EngineGeometry,
    EngineState,
    PerformanceMetrics,
    TransmissionMode,
)

__all__ = [
    "Command",
    "DisplaySnapshot",
    "EngineGeometry",
    "EngineState",
    "PerformanceMetrics",
    "TransmissionMode",
    "SixStrokeConfig",
    "default_config",
    "load_config",
]
