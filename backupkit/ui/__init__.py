"""Terminal output for Backup Kit."""

from backupkit.ui.backup_console import BackupConsole

__all__ = ["BackupConsole"]
