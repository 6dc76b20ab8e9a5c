"""Terminal adapter: ANSI dashboard renderer and raw non-blocking key polling.

Usage:
    with TerminalConsole() as console:
        run_loop(sim, console)
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from ..core.types import Command, DisplaySnapshot, TransmissionMode

if os.name == "nt":
    import msvcrt
else:
    import select
    import termios
    import tty

# ANSI escape codes
RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"

CLEAR_SCREEN = "\033[2J\033[H"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"

KEY_BINDINGS: dict[str, Command] = {
    "a": Command.ACCELERATE,
    "d": Command.DECELERATE,
    "e": Command.UPSHIFT,
    "q": Command.DOWNSHIFT,
    "m": Command.TOGGLE_MODE,
}

CONTROLS_LEGEND = (
    "a: Accelerate | d: Decelerate | e: Upshift | q: Downshift | m: Mode | Ctrl+C: Exit"
)

TITLE = "Advanced Six-Stroke Engine Simulation"

LABEL_WIDTH = 22
VALUE_WIDTH = 15
LEFT_COLUMN = (2, 25)
RIGHT_COLUMN = (42, 65)
SHIFT_ROW = 17


def key_to_command(key: str | None) -> Command:
    """Map a single key press to a command (unbound keys -> NONE)."""
    if not key:
        return Command.NONE
    return KEY_BINDINGS.get(key.lower(), Command.NONE)


def _move(row: int, col: int) -> str:
    return f"\033[{row};{col}H"


def _label(text: str, row: int, col: int) -> str:
    return f"{_move(row, col)}{BOLD}{CYAN}{text:<{LABEL_WIDTH}}{RESET}"


def _value(text: str, color: str, row: int, col: int) -> str:
    return f"{_move(row, col)}{color}{text:>{VALUE_WIDTH}}{RESET}"


def _trunc(value: float, width: int) -> str:
    """Fixed six-decimal rendering cut to ``width`` characters."""
    return f"{value:.6f}"[:width]


def _temperature_color(temperature: float) -> str:
    if temperature > 100:
        return RED
    if temperature < 80:
        return BLUE
    return GREEN


def render_header() -> str:
    """Screen clear plus title banner, drawn once."""
    return f"{CLEAR_SCREEN}{BOLD}{BLUE}{TITLE}\n{RESET}{WHITE}{'=' * 50}{RESET}\n\n"


def render_snapshot(snap: DisplaySnapshot) -> str:
    """Render one snapshot as absolute-positioned ANSI text."""
    m = snap.metrics
    lc, lv = LEFT_COLUMN
    rc, rv = RIGHT_COLUMN
    automatic = snap.transmission_mode is TransmissionMode.AUTOMATIC
    parts: list[str] = []

    if snap.shift_message_visible:
        parts.append(_label("Gear Shift:", SHIFT_ROW, lc))
        parts.append(_value(snap.shift_message, WHITE, SHIFT_ROW, lv))
    else:
        parts.append(_move(SHIFT_ROW, lc) + " " * 60)

    rows = [
        # Engine performance
        ("Displacement:", f"{int(m.displacement * 1_000_000)} cc", YELLOW, 3, lc, lv),
        ("Power Output:", f"{int(m.power)} kW", GREEN, 4, lc, lv),
        ("Torque:", f"{int(m.torque)} Nm", MAGENTA, 5, lc, lv),
        ("Thermal Efficiency:", f"{int(m.thermal_efficiency * 100)}%", BLUE, 6, lc, lv),
        # Engine state
        ("RPM:", f"{int(snap.rpm)}", RED, 8, lc, lv),
        (
            "Engine Temperature:",
            f"{int(snap.temperature)} °C",
            _temperature_color(snap.temperature),
            9,
            lc,
            lv,
        ),
        (
            "Water Injection:",
            "Active" if snap.water_injection_active else "Inactive",
            GREEN if snap.water_injection_active else YELLOW,
            10,
            lc,
            lv,
        ),
        # Vehicle dynamics
        ("Vehicle Speed:", f"{int(snap.vehicle_speed_kmh)} km/h", YELLOW, 12, lc, lv),
        ("Current Gear:", f"{snap.gear}", MAGENTA, 13, lc, lv),
        ("Acceleration:", f"{_trunc(snap.acceleration, 6)} m/s²", BLUE, 14, lc, lv),
        (
            "Transmission Mode:",
            snap.transmission_mode.value,
            GREEN if automatic else YELLOW,
            15,
            lc,
            lv,
        ),
        # Emissions and efficiency
        ("NOx Emissions:", f"{_trunc(m.nox, 5)} g/kWh", RED, 3, rc, rv),
        ("CO2 Emissions:", f"{int(m.co2)} g/km", YELLOW, 4, rc, rv),
        ("BSFC:", f"{_trunc(m.bsfc, 6)} g/kWh", MAGENTA, 5, rc, rv),
        ("Volumetric Efficiency:", f"{int(m.volumetric_efficiency * 100)}%", GREEN, 6, rc, rv),
        # Simulation stats
        ("FPS:", f"{int(snap.fps)}", CYAN, 8, rc, rv),
        ("Jerk:", f"{_trunc(snap.jerk, 6)} m/s³", BLUE, 9, rc, rv),
    ]
    for label, text, color, row, col_label, col_value in rows:
        parts.append(_label(label, row, col_label))
        parts.append(_value(text, color, row, col_value))

    parts.append(f"{_move(16, lc)}{WHITE}{BOLD}Controls: {RESET}{CONTROLS_LEGEND}")
    parts.append(_move(18, 1) + "\033[K" + snap.status_message)
    parts.append(_move(19, 1))
    return "".join(parts)


class TerminalConsole:
    """Interactive console: cbreak-mode keyboard input and ANSI output.

    Terminal attributes are restored on exit, including on KeyboardInterrupt.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._saved_attrs: list | None = None
        self._header_drawn = False

    def __enter__(self) -> TerminalConsole:
        if os.name != "nt" and self.stdin.isatty():
            fd = self.stdin.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        self.stdout.write(HIDE_CURSOR)
        self.stdout.flush()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._saved_attrs is not None:
            termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        self.stdout.write(SHOW_CURSOR + RESET + "\n")
        self.stdout.flush()

    def _read_key(self) -> str | None:
        if os.name == "nt":
            if msvcrt.kbhit():
                return msvcrt.getwch()
            return None
        ready, _, _ = select.select([self.stdin], [], [], 0)
        if ready:
            return self.stdin.read(1)
        return None

    def poll_command(self) -> Command:
        return key_to_command(self._read_key())

    def display(self, snapshot: DisplaySnapshot) -> None:
        if not self._header_drawn:
            self.stdout.write(render_header())
            self._header_drawn = True
        self.stdout.write(render_snapshot(snapshot))
        self.stdout.flush()
