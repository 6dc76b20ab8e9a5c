"""Simulation run CLI.

Usage:
    python -m sixstroke.cli.run                         # interactive terminal
    python -m sixstroke.cli.run --random-upgrades --seed 7
    python -m sixstroke.cli.run --headless --ticks 600  # JSON lines to stdout
"""

from __future__ import annotations

import argparse
import sys
from typing import Any

import numpy as np
from pydantic import ValidationError

from ..core.config import SixStrokeConfig, default_config, load_config, merge_config, save_config
from ..core.logging import get_logger, set_log_level, set_log_output
from ..thermo.upgrades import UpgradeKind

logger = get_logger(__name__)

# Launch order of the random upgrade draw
STARTUP_UPGRADE_ORDER = (
    UpgradeKind.DIRECT_INJECTION,
    UpgradeKind.TURBOCHARGER,
    UpgradeKind.VARIABLE_VALVE_TIMING,
    UpgradeKind.EXHAUST_GAS_RECIRCULATION,
    UpgradeKind.WASTE_HEAT_RECOVERY,
    UpgradeKind.SMART_COOLING,
    UpgradeKind.ADVANCED_MATERIALS,
    UpgradeKind.ENHANCED_ECU,
    UpgradeKind.CYLINDER_DEACTIVATION,
    UpgradeKind.VARIABLE_COMPRESSION,
    UpgradeKind.CERAMIC_COATING,
)


def choose_startup_upgrades(config: SixStrokeConfig, rng: np.random.Generator) -> list[str]:
    """Upgrade identifiers to pre-apply before the loop starts.

    Explicit identifiers come first (unvalidated; the simulation rejects
    unknown ones). With ``random_upgrades`` each known upgrade is added
    with probability 0.5.
    """
    chosen = list(config.simulation.upgrades)
    if config.simulation.random_upgrades:
        for kind in STARTUP_UPGRADE_ORDER:
            if rng.integers(0, 2) and kind.value not in chosen:
                chosen.append(kind.value)
    return chosen


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Real-time six-stroke engine simulation")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--upgrade",
        action="append",
        default=[],
        metavar="ID",
        help="Upgrade to pre-apply (repeatable)",
    )
    parser.add_argument("--random-upgrades", action="store_true", help="Pre-apply a random upgrade set")
    parser.add_argument("--tick-rate", type=float, default=None, help="Target ticks per second")
    parser.add_argument("--headless", action="store_true", help="Run without a terminal, emit JSON lines")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after N ticks (headless default 600)")
    parser.add_argument("--every", type=int, default=1, help="Headless: emit every N-th snapshot")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--log-file", type=str, default=None, help="Write log lines here (default stderr)")
    parser.add_argument("--save-config", type=str, default=None, help="Write the effective config and exit")
    return parser


def resolve_config(args: argparse.Namespace) -> SixStrokeConfig:
    """Load the config file (if any) and layer CLI overrides on top."""
    config = load_config(args.config) if args.config else default_config()

    sim_overrides: dict[str, Any] = {}
    if args.seed is not None:
        sim_overrides["seed"] = args.seed
    if args.tick_rate is not None:
        sim_overrides["tick_rate"] = args.tick_rate
    if args.upgrade:
        sim_overrides["upgrades"] = list(config.simulation.upgrades) + list(args.upgrade)
    if args.random_upgrades:
        sim_overrides["random_upgrades"] = True

    if sim_overrides:
        config = merge_config(config, {"simulation": sim_overrides})
    return config


def main(argv: list[str] | None = None) -> int:
    """Run the simulation.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success, 2 = bad configuration or unwritable log file).
    """
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.save_config:
        save_config(config, args.save_config)
        print(f"Config written to {args.save_config}")
        return 0

    try:
        log_stream = open(args.log_file, "a") if args.log_file else sys.stderr
    except OSError as exc:
        print(f"Cannot open log file: {exc}", file=sys.stderr)
        return 2
    set_log_output(log_stream)
    if not args.headless and not args.log_file and args.log_level in ("DEBUG", "INFO"):
        # stderr shares the screen with the dashboard
        set_log_level("WARN")
    try:
        return _run(config, args)
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 0
    finally:
        set_log_output(None)
        if args.log_file:
            log_stream.close()


def _run(config: SixStrokeConfig, args: argparse.Namespace) -> int:
    from ..adapters.headless import ScriptedConsole
    from ..adapters.terminal import TerminalConsole
    from ..sim.clock import SimulatedClock
    from ..sim.engine import EngineSimulation
    from ..sim.loop import run_loop

    rng = np.random.default_rng(config.simulation.seed)
    sim = EngineSimulation(config, rng=rng)
    rejected = sim.apply_upgrades(choose_startup_upgrades(config, rng))
    if rejected:
        logger.warn("startup upgrades rejected", rejected=rejected)

    if args.headless:
        clock = SimulatedClock()
        console = ScriptedConsole(output=sys.stdout, every=args.every, record=False)
        run_loop(
            sim,
            console,
            max_ticks=args.ticks if args.ticks is not None else 600,
            now=clock.now,
            sleep=clock.sleep,
        )
        return 0

    with TerminalConsole() as console:
        run_loop(sim, console, max_ticks=args.ticks)
    return 0


if __name__ == "__main__":
    sys.exit(main())
