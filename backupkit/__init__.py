"""Backup Kit - Directory backup tool.

A Python application that mirrors source directory trees into a backup
target, either as an additive copy, as a synchronized mirror, or as dated
isolated snapshots with age-based retention.
"""

__version__ = "1.0.0"

from .models import (
    BackupMode,
    BackupSettings,
    BackupSummary,
    CopyOutcome,
    DeferredError,
    LogMessage,
)

__all__ = [
    "__version__",
    "BackupMode",
    "BackupSettings",
    "BackupSummary",
    "CopyOutcome",
    "DeferredError",
    "LogMessage",
]


def main() -> None:
    """Entry point for the Backup Kit CLI application.

    This function is called when the `backupkit` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the backupkit.cli module.
    """
    from backupkit.cli import app
    app()
