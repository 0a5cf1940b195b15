"""progress reporting on stderr for resource operations.

stdout carries the JSON result read by the pipeline, so every message here
goes to stderr.
"""

import sys
from contextlib import contextmanager
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    Progress,
    TextColumn,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
    TimeRemainingColumn,
    TaskID,
)


class ProgressManager:
    """central manager for progress messages and transfer bars."""

    def __init__(self, console: Optional[Console] = None):
        """
        initialize progress manager.

        args:
            console: optional rich console instance. if not provided, creates one on stderr.
        """
        self.console = console or Console(stderr=True)
        self._enabled = self._should_show_progress()

    def _should_show_progress(self) -> bool:
        """
        check if we should show transfer bars.

        returns false in non-interactive environments (ci workers, piped output).
        """
        return sys.stderr.isatty() and not sys.stderr.closed

    def print(self, message: str):
        """print a plain message; file names are never treated as markup."""
        self.console.print(escape(message), highlight=False)

    @contextmanager
    def transfer(self, description: str):
        """
        create a byte progress context for a single file transfer.

        args:
            description: text to display next to the bar

        yields:
            tuple of (Progress instance, task_id)
        """
        if not self._enabled:
            yield _DummyProgress(), None
            return

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(escape(description), total=None)
            yield progress, task_id


class _DummyProgress:
    """dummy progress object for non-interactive mode."""

    def update(self, task_id: Optional[TaskID], **kwargs):
        """update a task (no-op)."""
        pass
