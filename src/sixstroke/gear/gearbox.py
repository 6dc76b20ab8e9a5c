"""Discrete gearbox with clamped up/down transitions.

Gears are addressed 1-based. Shifting past either end is a silent no-op,
so every transition is a total function over the clamped domain.
"""

from __future__ import annotations

from collections.abc import Sequence

DEFAULT_RATIOS = (3.42, 2.14, 1.45, 1.0, 0.83)


class Gearbox:
    """Ordered gear ratios plus the currently engaged gear."""

    def __init__(self, ratios: Sequence[float] = DEFAULT_RATIOS, gear: int = 1) -> None:
        if len(ratios) == 0:
            raise ValueError("gearbox needs at least one ratio")
        self._ratios = tuple(float(r) for r in ratios)
        if not 1 <= gear <= len(self._ratios):
            raise ValueError(f"gear must be in [1, {len(self._ratios)}], got {gear}")
        self._gear = gear

    @property
    def ratios(self) -> tuple[float, ...]:
        return self._ratios

    @property
    def gear_count(self) -> int:
        return len(self._ratios)

    def current_gear(self) -> int:
        """Return the 1-based index of the engaged gear."""
        return self._gear

    def current_ratio(self) -> float:
        """Return the ratio of the engaged gear."""
        return self._ratios[self._gear - 1]

    def is_top(self) -> bool:
        return self._gear == len(self._ratios)

    def is_bottom(self) -> bool:
        return self._gear == 1

    def shift_up(self) -> bool:
        """Engage the next higher gear.

        Returns:
            True if the gear changed, False when already in top gear.
        """
        if self.is_top():
            return False
        self._gear += 1
        return True

    def shift_down(self) -> bool:
        """Engage the next lower gear.

        Returns:
            True if the gear changed, False when already in first gear.
        """
        if self.is_bottom():
            return False
        self._gear -= 1
        return True

    def __repr__(self) -> str:
        return f"Gearbox(gear={self._gear}, ratios={list(self._ratios)})"
