"""
File copy decisions for the backup utility.

This module contains the FileCopier class, which decides per file whether
to copy, skip, or defer it, and performs the copy when appropriate.
"""

import errno
import logging
import os
import shutil
import stat
import time
from pathlib import Path
from typing import Callable, Optional

from backupkit.log_sink import LogSink, logging_sink
from backupkit.models import BackupSettings, CopyOutcome
from backupkit.scanning.exclusion_filter import ExclusionFilter

# Configure module logger
logger = logging.getLogger("backupkit.operations")

# Windows: "The filename or extension is too long."
ERROR_FILENAME_EXCED_RANGE = 206


def is_path_too_long(error: OSError) -> bool:
    """Check whether an OSError reports a platform path length violation."""
    if error.errno == errno.ENAMETOOLONG:
        return True
    return getattr(error, "winerror", None) == ERROR_FILENAME_EXCED_RANGE


class FileCopier:
    """
    Decides and performs the backup of individual files.

    The decision for a file is made in this order:
    1. Ineligible by exclusion rules (hidden / file type)
    2. Modified within the quiescence window (write in progress)
    3. Target already has the same last-write timestamp (already backed up)
    4. Copy, preserving the source timestamp, classifying any failure

    The last-write timestamp is the only identity check; file contents are
    never compared.
    """

    def __init__(
        self,
        settings: BackupSettings,
        exclusion_filter: Optional[ExclusionFilter] = None,
        log: Optional[LogSink] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Create a FileCopier for the given settings.

        Parameters:
            settings (BackupSettings): Settings supplying exclusion rules and the quiescence window.
            exclusion_filter (ExclusionFilter): Optional filter; one is built from settings if omitted.
            log (LogSink): Sink receiving COPYING/ERROR events. Defaults to the logging sink.
            clock (Callable[[], float]): Wall clock in epoch seconds, injectable for tests.
        """
        self.settings = settings
        self.exclusion_filter = exclusion_filter or ExclusionFilter(settings)
        self._log = log or logging_sink
        self._clock = clock

    def copy_file(
        self,
        source_file: Path,
        target_dir: Path,
        inherited_hidden: bool = False,
    ) -> CopyOutcome:
        """
        Back up a single file into ``target_dir``.

        Parameters:
            source_file (Path): File to back up.
            target_dir (Path): Directory the file is copied into (created if needed).
            inherited_hidden (bool): True when the file lies beneath a hidden directory.

        Returns:
            CopyOutcome: Classification of the attempt. Never raises for per-file I/O failures.
        """
        if self.exclusion_filter.is_file_excluded(source_file, inherited_hidden):
            return CopyOutcome.INELIGIBLE

        try:
            source_stat = source_file.stat()
        except OSError as e:
            self._log("ERROR", str(e))
            return CopyOutcome.EXCEPTION

        # Recently written files may still be open by their writer
        age_ms = (self._clock() - source_stat.st_mtime) * 1000
        if age_ms < self.settings.min_file_write_wait_ms:
            return CopyOutcome.WRITE_IN_PROGRESS

        target_file = target_dir / source_file.name

        if self._is_already_backed_up(target_file, source_stat):
            return CopyOutcome.ALREADY_BACKED_UP

        self._log("COPYING", str(source_file))

        try:
            self._copy(source_file, target_dir, target_file)
        except OSError as e:
            self._log("ERROR", str(e))
            if is_path_too_long(e):
                return CopyOutcome.PATH_TOO_LONG
            # File may be locked or in use by another process
            return CopyOutcome.EXCEPTION

        logger.debug(f"Copied: {source_file} -> {target_file}")
        return CopyOutcome.OK

    def _is_already_backed_up(self, target_file: Path, source_stat: os.stat_result) -> bool:
        """
        Check whether the target holds a copy with the source's last-write time.

        Returns:
            bool: True if the target exists with an identical modification timestamp.
        """
        try:
            target_stat = target_file.stat()
        except OSError:
            return False
        return stat.S_ISREG(target_stat.st_mode) and target_stat.st_mtime_ns == source_stat.st_mtime_ns

    def _copy(self, source_file: Path, target_dir: Path, target_file: Path) -> None:
        """
        Copy a file into the target directory, overwriting and preserving timestamps.

        Creates the target directory when missing and clears the read-only
        attribute of an existing target so a backup is never left stale.

        Raises:
            OSError: Any failure creating the directory or copying the file,
                including a directory standing at the target file's path.
        """
        if not target_dir.is_dir():
            self._create_target_dir(source_file.parent, target_dir)
        elif target_file.is_dir():
            # copy2 would otherwise write into the directory
            raise IsADirectoryError(errno.EISDIR, "Target path is a directory", str(target_file))
        elif target_file.is_file():
            mode = target_file.stat().st_mode
            if not mode & stat.S_IWRITE:
                os.chmod(target_file, mode | stat.S_IWRITE)

        # copy2 preserves the last-write time needed by the already-backed-up check
        shutil.copy2(source_file, target_file)

    @staticmethod
    def _create_target_dir(source_dir: Path, target_dir: Path) -> None:
        """
        Create a target directory carrying the permission bits of its source.

        The owner always keeps full access so the directory can be filled
        and later pruned.
        """
        target_dir.mkdir(parents=True, exist_ok=True)
        mode = stat.S_IMODE(source_dir.stat().st_mode)
        os.chmod(target_dir, mode | stat.S_IRWXU)
