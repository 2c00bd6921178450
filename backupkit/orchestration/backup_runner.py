"""BackupRunner for executing one backup run.

This module provides the BackupRunner class that coordinates ExclusionFilter,
FileCopier, TreeWalker, FileRemover, the mode handlers and RetryEngine to
execute a single backup according to a BackupSettings value.

Example:
    from backupkit.orchestration import BackupRunner

    runner = BackupRunner(settings)
    summary = runner.run()
    print(summary.files_copied, summary.error_count)
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from backupkit.log_sink import LogSink, logging_sink
from backupkit.models import BackupSettings, BackupSummary, CopyOutcome, DeferredError
from backupkit.modes import MODE_HANDLERS, BackupContext
from backupkit.operations import FileCopier, FileRemover, RetryEngine
from backupkit.scanning import BackupAbortedError, ExclusionFilter, TreeWalker

# Configure module logger
logger = logging.getLogger("backupkit.orchestration")


class BackupRunner:
    """Runs one backup for a fixed set of settings.

    The run is a single pass:
    - validate the settings and check every source directory exists
    - create the target root if needed
    - dispatch the configured mode handler over all sources
    - re-attempt transient failures (when retry is enabled)
    - report unresolved failures grouped by classification

    A BackupRunner may be run more than once; every run starts with an
    empty error queue.

    Attributes:
        settings: The BackupSettings being executed.
    """

    def __init__(
        self,
        settings: BackupSettings,
        log_sink: Optional[LogSink] = None,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the BackupRunner.

        Args:
            settings: Settings describing what to back up and how.
            log_sink: Receives every (category, detail) event of the run.
                Defaults to the standard logging sink.
            sleep: Sleep function used between retry sweeps.
            now: Clock used for snapshot names and retention ages.
        """
        self.settings = settings
        self._log = log_sink or logging_sink
        self._sleep = sleep
        self._now = now
        self._errors: List[DeferredError] = []

    def run(self) -> BackupSummary:
        """Execute the backup.

        Returns:
            BackupSummary with the files copied, entries deleted and every
            failure that could not be resolved.

        Raises:
            ValueError: If the settings are invalid. Nothing is touched.
            FileNotFoundError: If a source directory does not exist.
            BackupAbortedError: If one directory produced too many errors.
        """
        self._validate()

        settings = self.settings
        mode = settings.backup_mode
        started = time.monotonic()

        self._log(f"Running backup ({mode.name})...", "")

        target_root = settings.target_dir
        target_root.mkdir(parents=True, exist_ok=True)

        # Error queue is per-run state
        self._errors = []

        exclusion_filter = ExclusionFilter(settings)
        copier = FileCopier(settings, exclusion_filter, log=self._log)
        walker = TreeWalker(exclusion_filter, copier, log=self._log, skip_paths=[target_root])
        remover = FileRemover(log=self._log)

        context = BackupContext(
            settings=settings,
            target_root=target_root,
            exclusion_filter=exclusion_filter,
            walker=walker,
            remover=remover,
            log=self._log,
            errors=self._errors,
            now=self._now,
        )

        try:
            backup_count = MODE_HANDLERS[mode](context)
        except BackupAbortedError as e:
            self._log("ABORTED", str(e))
            raise

        if settings.retry_enabled and self._errors:
            retry_engine = RetryEngine(
                copier,
                interval_ms=settings.retry_interval_ms,
                max_retry_time_ms=settings.max_retry_time_ms,
                log=self._log,
                sleep=self._sleep,
            )
            backup_count += retry_engine.retry_deferred(self._errors)

        self._log_unresolved_errors()
        self._log("COMPLETE", f"Backed up {backup_count} new files")

        summary = BackupSummary(
            backup_mode=mode,
            files_copied=backup_count,
            files_deleted=context.files_deleted,
            errors=list(self._errors),
            duration_seconds=time.monotonic() - started,
            snapshot_dir=context.snapshot_dir,
        )
        logger.debug(
            f"Backup finished: {summary.files_copied} copied, "
            f"{summary.files_deleted} deleted, {summary.error_count} error(s)"
        )
        return summary

    def _validate(self) -> None:
        """Check the settings and sources before anything is written.

        Raises:
            ValueError: If the settings are invalid.
            FileNotFoundError: If a source directory does not exist.
        """
        invalid = self.settings.get_invalid_settings()
        if invalid:
            details = "; ".join(f"{key}: {reason}" for key, reason in invalid.items())
            raise ValueError(f"Invalid backup settings - {details}")

        for source_dir in self.settings.source_dirs:
            if not source_dir.is_dir():
                raise FileNotFoundError(f"Source directory does not exist: {source_dir}")

    def _log_unresolved_errors(self) -> None:
        """Log the remaining failures, one group per classification."""
        grouped: Dict[CopyOutcome, List[DeferredError]] = {}
        for error in self._errors:
            grouped.setdefault(error.outcome, []).append(error)

        for outcome, errors in grouped.items():
            self._log(f"Unable to backup ({outcome.description}):", "")
            for error in errors:
                self._log("FILE", str(error.source_file))
