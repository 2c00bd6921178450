"""
Deletion of backed-up files and directories.

This module contains the FileRemover class used by sync pruning and
snapshot retention to delete target entries, even when read-only.
"""

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Optional

from backupkit.log_sink import LogSink, logging_sink

# Configure module logger
logger = logging.getLogger("backupkit.operations")


class FileRemover:
    """
    Deletes files and directory trees from the backup target.

    Read-only attributes are cleared before deleting. Failures are reported
    to the log sink and never raised, so one stubborn entry does not stop
    the rest of a pruning pass.
    """

    def __init__(self, log: Optional[LogSink] = None) -> None:
        self._log = log or logging_sink

    def delete_file(self, path: Path) -> bool:
        """
        Delete a single file, clearing its read-only attribute first.

        Parameters:
            path (Path): File to delete.

        Returns:
            bool: True if the file was deleted.
        """
        self._log("DELETING", str(path))
        try:
            self._make_writable(path)
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            self._log("ERROR", str(e))
            return False
        return True

    def delete_directory(self, path: Path) -> bool:
        """
        Delete a directory tree, clearing read-only attributes throughout.

        Parameters:
            path (Path): Directory to delete.

        Returns:
            bool: True if the directory was deleted.
        """
        self._log("DELETING", str(path))
        try:
            self._make_tree_writable(path)
            shutil.rmtree(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            self._log("ERROR", str(e))
            return False
        return True

    def delete(self, path: Path) -> bool:
        """Delete a file or directory, whichever ``path`` is."""
        if path.is_dir() and not path.is_symlink():
            return self.delete_directory(path)
        return self.delete_file(path)

    def _make_tree_writable(self, root: Path) -> None:
        self._make_writable(root)
        for dirpath, dirnames, filenames in os.walk(root):
            for name in dirnames + filenames:
                entry = Path(dirpath) / name
                if not entry.is_symlink():
                    self._make_writable(entry)

    @staticmethod
    def _make_writable(path: Path) -> None:
        try:
            mode = os.lstat(path).st_mode
            if not mode & stat.S_IWRITE:
                os.chmod(path, mode | stat.S_IWRITE)
        except OSError:
            # Deletion itself reports the failure
            logger.debug(f"Could not clear read-only attribute: {path}")
