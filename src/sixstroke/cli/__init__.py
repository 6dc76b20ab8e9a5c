"""CLI modules for running and evaluating the simulation.

Note: avoid importing submodules at import-time. This keeps `python -m sixstroke.cli.<cmd>`
free of `runpy` warnings and avoids side effects from eager imports.
"""

from __future__ import annotations


def run_main(argv: list[str] | None = None) -> int:
    """Lazy wrapper for `sixstroke.cli.run.main`."""

    from .run import main

    return main(argv)


def run_single_main(argv: list[str] | None = None) -> int:
    """Lazy wrapper for `sixstroke.cli.run_single.main`."""

    from .run_single import main

    return main(argv)


__all__ = ["run_main", "run_single_main"]
