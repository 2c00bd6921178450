"""
Models package for the backup utility.

This package provides convenient imports for all data models:
- BackupMode: Enum for the Copy / Sync / Isolated policies
- CopyOutcome: Enum classifying a single file copy attempt
- BackupSettings: Validated run settings
- DeferredError: Per-file failure queued for retry
- LogMessage: Category + detail log event
- BackupSummary: Backup run summary
"""

from .backup_mode import BackupMode
from .copy_outcome import CopyOutcome
from .data_models import (
    BackupSettings,
    DeferredError,
    LogMessage,
    BackupSummary,
)

__all__ = [
    "BackupMode",
    "CopyOutcome",
    "BackupSettings",
    "DeferredError",
    "LogMessage",
    "BackupSummary",
]
