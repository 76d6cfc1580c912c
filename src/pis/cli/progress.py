"""Rich-based progress feedback for long-running commands.

:class:`ProgressLogger` is a small explicit state machine:

* ``IDLE``: nothing live on screen.
* ``LOADING``: a spinner for a stage of unknown length.
* ``PROGRESS_SHOWN``: a transient bar counting processed items.

Every transition first stops whatever is live, so a spinner and a bar
are never shown together and permanent lines are never overwritten.
"""

from __future__ import annotations

import enum
from typing import Any

from pis.cli.console import get_rich_console
from pis.exceptions import EnvironmentError


class ProgressState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    PROGRESS_SHOWN = "progress"


class ProgressLogger:
    """Prefixed status output for one named job.

    Usage::

        with ProgressLogger("DB/Stada", "stations") as logger:
            logger.loading("Downloading stations")
            for index, station in enumerate(stations, start=1):
                logger.progress(index, len(stations), station.name)
            logger.finish(len(stations))

    Parameters
    ----------
    name:
        Prefix shown in brackets on every line.
    kind:
        Plural noun used in the final summary (e.g. ``"stations"``).
    """

    def __init__(self, name: str, kind: str, *, console: Any | None = None) -> None:
        try:
            from rich.markup import escape
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._name: str = name
        self._kind: str = kind
        self._prefix: str = f"[cyan]{escape(f'[{name}]')}[/cyan]"
        self._escape = escape
        self._console: Any = console if console is not None else get_rich_console()
        self._state: ProgressState = ProgressState.IDLE
        self._status: Any = None
        self._progress: Any = None
        self._task_id: Any = None

    @property
    def state(self) -> ProgressState:
        return self._state

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> ProgressLogger:
        return self

    def __exit__(self, *_args: object) -> None:
        self._stop()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def log(self, message: str) -> None:
        """Print a permanent line and return to ``IDLE``."""
        self._stop()
        self._console.print(f"{self._prefix} {self._escape(message)}")

    def warn(self, message: str) -> None:
        """Print a permanent, highlighted warning line."""
        self._stop()
        self._console.print(f"{self._prefix} [yellow]{self._escape(message)}[/yellow]")

    def loading(self, message: str) -> None:
        """Log *message* and keep a spinner running until the next call."""
        self.log(message)
        self._status = self._console.status(f"{self._prefix} {self._escape(message)}")
        self._status.start()
        self._state = ProgressState.LOADING

    def progress(self, index: int, total: int, item: str) -> None:
        """Show ``index/total`` on a transient bar labelled with *item*."""
        if self._state is not ProgressState.PROGRESS_SHOWN:
            self._stop()
            self._start_bar(total)
        description = f"{self._prefix} Processing {self._escape(self._name)} {self._escape(item)}"
        self._progress.update(
            self._task_id,
            total=total,
            completed=index,
            description=description,
        )

    def finish(self, amount: int | None = None) -> None:
        """Print the success summary and return to ``IDLE``."""
        count = f"{amount} " if amount else ""
        self.log(f"Successfully processed {count}{self._kind}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_bar(self, total: int) -> None:
        from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskProgressColumn, TextColumn

        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            console=self._console,
            transient=True,
        )
        self._progress.start()
        self._task_id = self._progress.add_task("", total=total)
        self._state = ProgressState.PROGRESS_SHOWN

    def _stop(self) -> None:
        """Stop the live display of the current state (idempotent)."""
        if self._state is ProgressState.LOADING and self._status is not None:
            self._status.stop()
        elif self._state is ProgressState.PROGRESS_SHOWN and self._progress is not None:
            self._progress.stop()
        self._status = None
        self._progress = None
        self._task_id = None
        self._state = ProgressState.IDLE
