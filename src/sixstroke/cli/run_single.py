"""Single operating-point evaluation CLI.

Usage:
    python -m sixstroke.cli.run_single --rpm 3000 --temperature 95 --upgrade turbocharger
    python -m sixstroke.cli.run_single --sweep --rpm-min 800 --rpm-max 6000 --rpm-n 14

Outputs JSON with the performance metrics to stdout.
"""

from __future__ import annotations

import argparse
import json
import sys

import numpy as np
from pydantic import ValidationError


def main(argv: list[str] | None = None) -> int:
    """Evaluate the performance model at one operating point (or an rpm sweep).

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success, 2 = bad configuration).
    """
    parser = argparse.ArgumentParser(description="Evaluate engine performance at one operating point")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--rpm", type=float, default=None, help="Engine speed (default: initial rpm)")
    parser.add_argument("--temperature", type=float, default=None, help="Engine temperature (°C)")
    parser.add_argument("--upgrade", action="append", default=[], metavar="ID", help="Active upgrade")
    parser.add_argument("--water-injection", action="store_true", help="Water injection active")
    parser.add_argument("--sweep", action="store_true", help="Evaluate an rpm sweep instead")
    parser.add_argument("--rpm-min", type=float, default=None)
    parser.add_argument("--rpm-max", type=float, default=None)
    parser.add_argument("--rpm-n", type=int, default=12)

    args = parser.parse_args(argv)

    from ..core.config import default_config, load_config
    from ..thermo.performance import compute_performance, performance_curve
    from ..thermo.upgrades import UnknownUpgradeError, UpgradeRegistry

    try:
        config = load_config(args.config) if args.config else default_config()
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    eng = config.engine
    geometry = eng.geometry()
    temperature = eng.initial_temperature if args.temperature is None else args.temperature

    registry = UpgradeRegistry()
    rejected = []
    for upgrade_id in args.upgrade:
        try:
            registry.activate(upgrade_id)
        except UnknownUpgradeError:
            rejected.append(upgrade_id)

    output: dict[str, object] = {
        "temperature": temperature,
        "water_injection": args.water_injection,
        "upgrades": [k.value for k in registry.active()],
        "rejected_upgrades": rejected,
    }

    if args.sweep:
        rpm_min = eng.idle_rpm if args.rpm_min is None else args.rpm_min
        rpm_max = eng.max_rpm if args.rpm_max is None else args.rpm_max
        rpm = np.linspace(rpm_min, rpm_max, max(args.rpm_n, 2))
        curve = performance_curve(
            geometry,
            rpm,
            temperature,
            eng.optimal_temperature,
            registry.active(),
            args.water_injection,
        )
        output["rpm"] = rpm.tolist()
        output["metrics"] = {k: v.tolist() for k, v in curve.items()}
    else:
        rpm = eng.initial_rpm if args.rpm is None else args.rpm
        metrics = compute_performance(
            geometry,
            rpm,
            temperature,
            eng.optimal_temperature,
            registry.active(),
            args.water_injection,
        )
        output["rpm"] = rpm
        output["metrics"] = metrics.to_dict()

    print(json.dumps(output, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
