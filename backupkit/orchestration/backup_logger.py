"""BackupLogger for writing a backup run to a structured log file.

This module provides the BackupLogger class. It is a log sink: once opened
it can be handed to BackupRunner directly, and every engine event is
written as one line of the run log.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from backupkit.models import BackupMode, BackupSummary, CopyOutcome, DeferredError, LogMessage


class BackupLogger:
    """Logger for backup runs with a header, event and summary section.

    Usage:
        with BackupLogger(backup_mode=BackupMode.SYNC) as backup_log:
            backup_log.log_header()
            summary = BackupRunner(settings, log_sink=backup_log).run()
            backup_log.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        backup_mode: Optional[BackupMode] = None,
    ) -> None:
        """Initialize the BackupLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            backup_mode: Mode of the run, shown in the header.

        Raises:
            OSError: If the log file path is not writable.
        """
        self._backup_mode = backup_mode
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None
        self._events_started = False

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"backup_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file path is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            test_file = parent / f".backupkit_test_{id(self)}"
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "BackupLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def __call__(self, category: str, detail: str = "") -> None:
        """Write one engine event, prefixed with the time it was received."""
        if not self._events_started:
            self._write_separator()
            self._write_line("BACKUP")
            self._write_separator()
            self._events_started = True

        message = LogMessage(category, detail)
        self._write_line(f"[{datetime.now().strftime('%H:%M:%S')}] {message.format()}")

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the header section: title, timestamp and mode."""
        self._write_separator()
        self._write_line("Backup Kit - Backup Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        if self._backup_mode is not None:
            self._write_line(f"Mode: {self._backup_mode.name}")
        self._write_line("")

    def log_summary(self, summary: BackupSummary) -> None:
        """Write the summary section to the log file.

        Args:
            summary: The BackupSummary returned by the run.
        """
        self._write_line("")
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Mode: {summary.backup_mode.name}")
        if summary.snapshot_dir is not None:
            self._write_line(f"Snapshot: {summary.snapshot_dir}")
        self._write_line(f"Files copied: {summary.files_copied:,}")
        self._write_line(f"Entries deleted: {summary.files_deleted:,}")
        self._write_line(f"Unresolved errors: {summary.error_count}")

        for outcome, errors in self._group_errors(summary.errors).items():
            self._write_line(f"{outcome.description}:", indent=2)
            for error in errors:
                self._write_line(f"- {error.source_file}", indent=4)

        self._write_line(f"Duration: {self._format_duration(summary.duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def log_failure(self, message: str) -> None:
        """Record a run that ended with an exception instead of a summary."""
        self._write_line("")
        self._write_separator()
        self._write_line("FAILED")
        self._write_separator()
        self._write_line(message)
        self._write_separator()

    @staticmethod
    def _group_errors(errors: List[DeferredError]) -> Dict[CopyOutcome, List[DeferredError]]:
        grouped: Dict[CopyOutcome, List[DeferredError]] = {}
        for error in errors:
            grouped.setdefault(error.outcome, []).append(error)
        return grouped

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format.

        Args:
            seconds: Duration in seconds.

        Returns:
            Formatted string like "5m 23s", "1h 5m 30s", or "45s".
        """
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation.

        Args:
            text: The text to write.
            indent: Number of spaces to indent the line.
        """
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
