"""
CopyOutcome enum describing the result of one file backup attempt.

Outcomes fall into four groups:
- Success: OK
- Not an error: INELIGIBLE, ALREADY_BACKED_UP
- Transient (retried): WRITE_IN_PROGRESS, EXCEPTION
- Structural (never retried): PATH_TOO_LONG
"""

from enum import Enum


class CopyOutcome(Enum):
    """Classification of a single file copy attempt."""
    OK = "OK"
    INELIGIBLE = "Ineligible due to config"
    ALREADY_BACKED_UP = "Already backed-up"
    WRITE_IN_PROGRESS = "File busy, write in progress"
    EXCEPTION = "Exception"
    PATH_TOO_LONG = "Target path is too long"

    @property
    def description(self) -> str:
        return self.value

    @property
    def is_error(self) -> bool:
        """True when the outcome must be recorded as a deferred error."""
        return self in (
            CopyOutcome.WRITE_IN_PROGRESS,
            CopyOutcome.EXCEPTION,
            CopyOutcome.PATH_TOO_LONG,
        )

    @property
    def can_be_retried(self) -> bool:
        """True when the failure is transient and worth re-attempting."""
        return self in (CopyOutcome.WRITE_IN_PROGRESS, CopyOutcome.EXCEPTION)
