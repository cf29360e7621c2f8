"""Byte-level transfer progress, rendered with rich when attached to a terminal."""

from __future__ import annotations

import sys
from typing import Callable, Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class Reporter(Protocol):
    """Observational progress sink shared by export, import and the core updater."""

    def increment(self, amount: int) -> None: ...

    def finish(self) -> None: ...


ProgressFactory = Callable[[int, str], Reporter]


class TransferReporter:
    """
    Progress for a transfer whose total byte count is known up front.

    Purely observational: nothing consults it to decide what to do next.
    """

    def __init__(self, total: int, message: str = "", enabled: bool | None = None) -> None:
        self.total = total
        self.message = message
        self.completed = 0
        self.finished = False
        if enabled is None:
            enabled = sys.stderr.isatty()
        self._progress: Progress | None = None
        self._task = None
        if enabled:
            self._progress = Progress(
                SpinnerColumn(style="green"),
                TextColumn("{task.description}"),
                TimeElapsedColumn(),
                BarColumn(complete_style="cyan", finished_style="blue"),
                DownloadColumn(),
                TransferSpeedColumn(),
                TimeRemainingColumn(),
                console=Console(stderr=True),
                transient=False,
            )
            self._progress.start()
            self._task = self._progress.add_task(message, total=total or None)

    def increment(self, amount: int) -> None:
        self.completed += amount
        if self._progress is not None and self._task is not None:
            self._progress.advance(self._task, amount)

    def finish(self) -> None:
        if self.finished:
            return
        self.finished = True
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=self.completed, total=self.completed or None)
            self._progress.stop()

    def __enter__(self) -> TransferReporter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finish()


def silent_progress(total: int, message: str = "") -> TransferReporter:
    """Factory that never renders (--no-progress, tests)."""
    return TransferReporter(total, message, enabled=False)
