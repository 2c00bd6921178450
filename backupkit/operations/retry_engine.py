"""
Retry of deferred copy failures for the backup utility.

This module contains the RetryEngine class, which re-attempts transient
failures recorded during a traversal pass within a bounded time budget.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from backupkit.log_sink import LogSink, logging_sink
from backupkit.models import CopyOutcome, DeferredError

from .file_copier import FileCopier

# Configure module logger
logger = logging.getLogger("backupkit.operations")


class RetryEngine:
    """
    Re-attempts retryable DeferredError records after a traversal pass.

    Only WRITE_IN_PROGRESS and EXCEPTION records are retried. Each sweep
    sleeps for a fixed interval, then re-attempts every pending record;
    sweeps continue until nothing is pending or the time budget is spent.
    """

    def __init__(
        self,
        copier: FileCopier,
        interval_ms: int = 500,
        max_retry_time_ms: int = 3000,
        log: Optional[LogSink] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Create a RetryEngine.

        Parameters:
            copier (FileCopier): Copier used to re-attempt each file.
            interval_ms (int): Sleep before each retry sweep, in milliseconds.
            max_retry_time_ms (int): Wall-clock budget for all sweeps, in milliseconds.
            log (LogSink): Sink for progress events. Defaults to the logging sink.
            sleep (Callable[[float], None]): Sleep function taking seconds, injectable for tests.
            clock (Callable[[], float]): Monotonic clock in seconds, injectable for tests.
        """
        self.copier = copier
        self.interval_ms = interval_ms
        self.max_retry_time_ms = max_retry_time_ms
        self._log = log or logging_sink
        self._sleep = sleep
        self._clock = clock

    def retry_deferred(self, errors: List[DeferredError]) -> int:
        """
        Re-attempt the retryable records in ``errors``.

        Records that are resolved are removed from ``errors`` in place; records
        that fail again are updated with the new classification and time.
        Whatever remains in ``errors`` afterwards is final for this run.

        Parameters:
            errors (List[DeferredError]): The run's error queue.

        Returns:
            int: Number of files successfully copied by the retries.
        """
        pending = [error for error in errors if error.can_be_retried]
        if not pending:
            return 0

        self._log("Re-attempting errors...", "")

        backup_count = 0
        start = self._clock()

        while pending and (self._clock() - start) * 1000 < self.max_retry_time_ms:
            # File likely in use, give the writer time to finish
            self._sleep(self.interval_ms / 1000)

            still_pending: List[DeferredError] = []
            for error in pending:
                outcome = self.copier.copy_file(error.source_file, error.target_dir)

                if outcome is CopyOutcome.OK:
                    backup_count += 1
                    errors.remove(error)
                elif outcome in (CopyOutcome.ALREADY_BACKED_UP, CopyOutcome.INELIGIBLE):
                    errors.remove(error)
                else:
                    error.outcome = outcome
                    error.timestamp = datetime.now()
                    if outcome.can_be_retried:
                        still_pending.append(error)

            pending = still_pending

        logger.debug(f"Retry resolved {backup_count} file(s), {len(pending)} still pending")
        return backup_count
