"""Headless console: scripted commands in, JSON-lines snapshots out."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterable
from typing import TextIO

from ..core.types import Command, DisplaySnapshot


class ScriptedConsole:
    """Feeds a fixed command script and records or streams snapshots.

    Args:
        commands: Commands returned by successive polls; ``Command.NONE``
            once exhausted.
        output: If given, each snapshot is written as one JSON line.
        every: Only stream every n-th snapshot.
        record: Keep every snapshot in ``snapshots``.
    """

    def __init__(
        self,
        commands: Iterable[Command] = (),
        output: TextIO | None = None,
        every: int = 1,
        record: bool = True,
    ) -> None:
        self._commands = deque(commands)
        self.output = output
        self.every = max(1, every)
        self.record = record
        self.snapshots: list[DisplaySnapshot] = []

    def poll_command(self) -> Command:
        if self._commands:
            return self._commands.popleft()
        return Command.NONE

    def display(self, snapshot: DisplaySnapshot) -> None:
        if self.record:
            self.snapshots.append(snapshot)
        if self.output is not None and snapshot.tick % self.every == 0:
            print(json.dumps(snapshot.to_dict()), file=self.output)
