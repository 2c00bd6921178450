"""Exclusion rules for files and directories.

This module provides the ExclusionFilter class, a set of pure predicates
over BackupSettings that decide whether a file or directory takes part in
a backup.

Example:
    >>> from backupkit.scanning import ExclusionFilter
    >>> exclusion = ExclusionFilter(settings)
    >>> exclusion.is_file_type_excluded("notes.TMP")
    True
"""

import os
import stat
from pathlib import Path
from typing import Union

from backupkit.models import BackupSettings

PathLike = Union[str, Path]


class ExclusionFilter:
    """Decides which files and directories are excluded from a backup.

    A file is excluded when its extension is in the excluded types, or when
    hidden files are ignored and the file is hidden. A directory is excluded
    when its name is in the excluded directories. Hiddenness is inherited:
    everything beneath a hidden directory is treated as hidden, whatever its
    own attributes say.

    Name comparisons are case-insensitive. The filter has no side effects.

    Attributes:
        settings: The BackupSettings the rules are read from.
    """

    def __init__(self, settings: BackupSettings) -> None:
        self.settings = settings

    def is_file_type_excluded(self, name: PathLike) -> bool:
        """Check whether a file's extension is in the excluded types."""
        if not self.settings.excluded_types:
            return False
        extension = os.path.splitext(os.path.basename(str(name)))[1]
        return extension.lstrip(".").lower() in self.settings.excluded_types

    def is_directory_excluded(self, name: PathLike) -> bool:
        """Check whether a directory name is in the excluded directories."""
        if not self.settings.excluded_dirs:
            return False
        return os.path.basename(os.path.normpath(str(name))).lower() in self.settings.excluded_dirs

    def is_file_excluded(self, path: Path, inherited_hidden: bool = False) -> bool:
        """Check whether a file is ineligible for backup.

        Args:
            path: File to check.
            inherited_hidden: True when an ancestor directory is hidden.

        Returns:
            True if the file type is excluded, or hidden files are ignored
            and the file is (effectively) hidden.
        """
        if self.is_file_type_excluded(path.name):
            return True
        return self.settings.ignore_hidden_files and (inherited_hidden or self.is_hidden(path))

    def is_directory_skipped(self, path: Path, inherited_hidden: bool = False) -> bool:
        """Check whether a whole directory subtree should be skipped."""
        if self.is_directory_excluded(path.name):
            return True
        return self.settings.ignore_hidden_files and (inherited_hidden or self.is_hidden(path))

    @staticmethod
    def is_hidden(path: Path) -> bool:
        """Check whether a path carries the hidden attribute.

        Dot-prefixed names count as hidden on every platform. The Windows
        hidden attribute and the BSD/macOS ``UF_HIDDEN`` flag are honoured
        where the platform reports them.
        """
        if path.name.startswith("."):
            return True
        try:
            st = os.lstat(path)
        except OSError:
            return False
        if getattr(st, "st_file_attributes", 0) & stat.FILE_ATTRIBUTE_HIDDEN:
            return True
        return bool(getattr(st, "st_flags", 0) & stat.UF_HIDDEN)
