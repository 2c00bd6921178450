"""Console output for Backup Kit runs.

This module provides the BackupConsole class, a Rich-based log sink that
prints engine events one per line and renders the end-of-run summary.

Example:
    from backupkit.ui import BackupConsole

    backup_console = BackupConsole()
    summary = BackupRunner(settings, log_sink=backup_console.log).run()
    backup_console.display_summary(summary)
"""

from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from backupkit.models import BackupSummary, CopyOutcome, DeferredError, LogMessage

CATEGORY_STYLES = {
    "COPYING": "green",
    "DELETING": "yellow",
    "ERROR": "bold red",
    "ABORTED": "bold red",
    "COMPLETE": "bold green",
}


class BackupConsole:
    """Rich-based console output for backup runs.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).
        verbose: When False, per-directory progress events are not shown.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    QUIET_CATEGORIES = frozenset({"Backing up DIR"})

    def __init__(self, console: Optional[Console] = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose

    def log(self, category: str, detail: str = "") -> None:
        """Print one engine event, truncated to fit on a single console line."""
        if not self.verbose and category in self.QUIET_CATEGORIES:
            return

        line = LogMessage(category, detail).format(max_length=self.console.width - 1)
        self.console.print(
            line,
            style=CATEGORY_STYLES.get(category),
            markup=False,
            highlight=False,
            no_wrap=True,
            overflow="ignore",
        )

    def display_summary(self, summary: BackupSummary) -> None:
        """Display the statistics of a finished run.

        Shows a table with the run statistics and, when some files could not
        be backed up, a panel listing them by failure classification.

        Args:
            summary: BackupSummary returned by the run.
        """
        ok = summary.completed_without_error
        header_panel = Panel(
            f"Backup Summary ({summary.backup_mode.name})",
            border_style="green" if ok else "red",
        )
        self.console.print(header_panel)

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Files copied", f"{summary.files_copied:,}")
        table.add_row("Entries deleted", f"{summary.files_deleted:,}")
        table.add_row("Unresolved errors", f"{summary.error_count:,}")
        if summary.snapshot_dir is not None:
            table.add_row("Snapshot", Text(str(summary.snapshot_dir)))
        table.add_row("Duration", self._format_duration(summary.duration_seconds))

        self.console.print(table)

        if summary.errors:
            self._display_errors(summary.errors)

    def display_error(self, message: str) -> None:
        """Display a fatal error that ended the run."""
        self.console.print(Panel(Text(message), title="Error", border_style="red"))

    def _display_errors(self, errors: List[DeferredError]) -> None:
        """Display unresolved failures grouped by classification.

        Args:
            errors: Unresolved DeferredError records.
        """
        max_display = 10
        grouped: Dict[CopyOutcome, List[DeferredError]] = {}
        for error in errors:
            grouped.setdefault(error.outcome, []).append(error)

        lines: List[str] = []
        for outcome, outcome_errors in grouped.items():
            lines.append(f"{outcome.description}:")
            lines.extend(f"- {e.source_file}" for e in outcome_errors[:max_display])
            remaining = len(outcome_errors) - max_display
            if remaining > 0:
                lines.append(f"... and {remaining} more")

        error_panel = Panel(
            Text("\n".join(lines)),
            title=f"Errors ({len(errors)})",
            border_style="red",
        )
        self.console.print(error_panel)

    def _format_duration(self, seconds: float) -> str:
        """Convert seconds to human-readable duration (e.g. "5m 23s")."""
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
