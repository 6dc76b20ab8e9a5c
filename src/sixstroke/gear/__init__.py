"""Gear module — discrete gearbox state machine."""

from .gearbox import Gearbox

__all__ = ["Gearbox"]
