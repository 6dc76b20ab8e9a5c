"""Adapters — terminal and headless consoles for the simulation loop."""

from .headless import ScriptedConsole
from .terminal import TerminalConsole, key_to_command, render_snapshot

__all__ = ["ScriptedConsole", "TerminalConsole", "key_to_command", "render_snapshot"]
