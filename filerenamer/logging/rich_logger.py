"""Progress reporters: Rich terminal output, quiet, and callback forwarding."""
from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
    MofNCompleteColumn,
    TaskID,
)
from rich.table import Table
from rich.panel import Panel
from rich.text import Text

from ..core.config import ProgressKind
from ..core.models import FlattenTotals, TransferResult


logger = logging.getLogger(__name__)

_KIND_STYLE = {
    ProgressKind.LOG: "[dim]•[/dim]",
    ProgressKind.INFO: "[blue]ℹ[/blue]",
    ProgressKind.ERROR: "[red]✗[/red]",
    ProgressKind.SUCCESS: "[green]✓[/green]",
}


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route the package's log records through Rich on stderr."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    root = logging.getLogger("filerenamer")
    root.handlers[:] = [handler]
    root.setLevel(level)
    root.propagate = False


class RichProgressReporter:
    """Progress reporter using Rich for terminal output.

    Implements the ProgressReporter protocol. A progress bar is shown
    while a phase is active; status messages without a phase are only
    printed in verbose mode.
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Print every log line, including plain ``log`` entries.
            quiet: Suppress everything except errors.
            console: Console to draw on (stderr by default).
        """
        self._console = console or Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet
        self._progress: Optional[Progress] = None
        self._current_task_id: Optional[TaskID] = None

    # --- Phase Management ---

    def start_phase(self, name: str, total: Optional[int]) -> None:
        """Start a progress bar for ``total`` files."""
        if self._quiet:
            return

        self.end_phase()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TextColumn("[cyan]•"),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._progress.start()
        self._current_task_id = self._progress.add_task(name, total=total)

    def end_phase(self) -> None:
        if self._progress:
            self._progress.stop()
            self._progress = None
            self._current_task_id = None

    # --- ProgressReporter protocol ---

    def progress(
        self,
        message: Optional[str] = None,
        processed_files: Optional[int] = None,
    ) -> None:
        if self._progress and self._current_task_id is not None:
            fields: dict[str, Any] = {}
            if processed_files is not None:
                fields["completed"] = processed_files
            if message:
                fields["description"] = escape(message)
            self._progress.update(self._current_task_id, **fields)
        elif message and self._verbose:
            self._console.print(f"[dim]  {escape(message)}[/dim]")

    def log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        kind = ProgressKind(kind)
        if kind == ProgressKind.ERROR:
            self._console.print(f"{_KIND_STYLE[kind]} {escape(message)}", style="red")
            return
        if self._quiet:
            return
        if kind == ProgressKind.LOG and not self._verbose:
            return
        self._console.print(f"{_KIND_STYLE[kind]} {escape(message)}")

    # --- Specialized Output ---

    def print_header(self, title: str) -> None:
        if self._quiet:
            return
        self._console.print(Panel(Text(title, style="bold cyan"), border_style="cyan"))

    def print_result(self, result: TransferResult) -> None:
        """Print batch totals and any errors."""
        if not self._quiet:
            table = Table(title="Batch Complete", show_header=False)
            table.add_column("Metric", style="cyan")
            table.add_column("Count", style="green", justify="right")

            table.add_row("Total Files", str(result.total_files))
            table.add_row("Files Renamed", str(result.files_renamed))
            table.add_row("Duplicates Quarantined", str(result.duplicates_quarantined))
            table.add_row("Skipped", str(result.skipped_files))
            table.add_row("Errors", str(len(result.errors)))
            self._console.print(table)

            if result.quarantined_file_names and self._verbose:
                self._console.print("[yellow]Quarantined:[/yellow]")
                for name in result.quarantined_file_names:
                    self._console.print(f"  {escape(name)}")

        for error in result.errors:
            self.log(error, ProgressKind.ERROR)

    def print_flatten_result(self, totals: FlattenTotals) -> None:
        if not self._quiet:
            table = Table(title="Folders Flattened", show_header=False)
            table.add_column("Metric", style="cyan")
            table.add_column("Count", style="green", justify="right")
            table.add_row("Files Extracted", str(totals.total_files_extracted))
            table.add_row("Folders Deleted", str(totals.total_folders_deleted))
            table.add_row("Errors", str(len(totals.errors)))
            self._console.print(table)

        for error in totals.errors:
            self.log(error, ProgressKind.ERROR)

    # --- Context Managers ---

    def __enter__(self) -> "RichProgressReporter":
        return self

    def __exit__(self, *args) -> None:
        self.end_phase()


class QuietProgressReporter:
    """Minimal progress reporter that only shows errors."""

    def start_phase(self, name: str, total: Optional[int]) -> None:
        pass

    def end_phase(self) -> None:
        pass

    def progress(
        self,
        message: Optional[str] = None,
        processed_files: Optional[int] = None,
    ) -> None:
        pass

    def log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        if kind == ProgressKind.ERROR:
            print(f"ERROR: {message}", file=sys.stderr)

    def print_header(self, title: str) -> None:
        pass

    def print_result(self, result: TransferResult) -> None:
        pass

    def print_flatten_result(self, totals: FlattenTotals) -> None:
        pass

    def __enter__(self) -> "QuietProgressReporter":
        return self

    def __exit__(self, *args) -> None:
        pass


class CallbackProgressReporter:
    """Forwards both channels to shell callbacks as camelCase payloads.

    Progress payloads look like ``{"message": ..., "processedFiles": ...}``
    and log payloads like ``{"message": ..., "type": "info"}``. A callback
    that raises is logged and ignored so the batch keeps running.
    """

    def __init__(
        self,
        on_progress: Optional[Callable[[dict], None]] = None,
        on_log: Optional[Callable[[dict], None]] = None,
    ):
        self._on_progress = on_progress
        self._on_log = on_log

    def progress(
        self,
        message: Optional[str] = None,
        processed_files: Optional[int] = None,
    ) -> None:
        payload: dict[str, Any] = {}
        if message is not None:
            payload["message"] = message
        if processed_files is not None:
            payload["processedFiles"] = processed_files
        self._emit(self._on_progress, payload)

    def log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        self._emit(self._on_log, {"message": message, "type": ProgressKind(kind).value})

    def _emit(self, callback: Optional[Callable[[dict], None]], payload: dict) -> None:
        if callback is None:
            return
        try:
            callback(payload)
        except Exception:
            logger.exception("Progress callback failed")
