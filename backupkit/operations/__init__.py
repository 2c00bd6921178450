"""File operations package for backupkit.

This package provides the classes that touch the target filesystem:
- FileCopier: Per-file copy decision and copy (timestamp-preserving).
- RetryEngine: Bounded re-attempts of transient copy failures.
- FileRemover: Deletion of target files and trees, even when read-only.

Example:
    >>> from backupkit.operations import FileCopier
    >>> copier = FileCopier(settings)
    >>> outcome = copier.copy_file(Path("/data/report.txt"), Path("/backup/data"))
    >>> print(outcome.description)
"""

from .file_copier import FileCopier
from .file_remover import FileRemover
from .retry_engine import RetryEngine

__all__ = ["FileCopier", "FileRemover", "RetryEngine"]
