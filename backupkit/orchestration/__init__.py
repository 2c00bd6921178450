"""Run orchestration package for Backup Kit.

This package contains the components that drive a backup run:
- BackupRunner: Executes one backup for a BackupSettings value.
- BackupLogger: Structured logging of a run to a timestamped log file.
"""

from backupkit.orchestration.backup_logger import BackupLogger
from backupkit.orchestration.backup_runner import BackupRunner

__all__ = ["BackupLogger", "BackupRunner"]
