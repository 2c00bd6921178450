"""Unit tests for RetryEngine."""

from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import pytest

from backupkit.models import CopyOutcome, DeferredError
from backupkit.operations import RetryEngine


class FakeClock:
    """Monotonic clock that only moves when the engine sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def make_error(name: str, outcome: CopyOutcome) -> DeferredError:
    return DeferredError(
        source_file=Path("/data") / name,
        source_subdir=Path("data"),
        target_dir=Path("/backup/data"),
        outcome=outcome,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_engine(copier, clock: FakeClock, recorder=None) -> RetryEngine:
    return RetryEngine(
        copier,
        interval_ms=500,
        max_retry_time_ms=3000,
        log=recorder,
        sleep=clock.sleep,
        clock=clock,
    )


@pytest.mark.unit
class TestRetryEngine:
    """Tests for bounded re-attempts of deferred errors."""

    def test_nothing_to_retry(self, clock, recorder):
        copier = MagicMock()
        errors = [make_error("long.txt", CopyOutcome.PATH_TOO_LONG)]

        copied = make_engine(copier, clock, recorder).retry_deferred(errors)

        assert copied == 0
        copier.copy_file.assert_not_called()
        assert clock.sleeps == []
        assert recorder.events == []
        assert len(errors) == 1

    def test_transient_error_resolved_on_retry(self, clock, recorder):
        copier = MagicMock()
        copier.copy_file.return_value = CopyOutcome.OK
        errors = [make_error("busy.txt", CopyOutcome.WRITE_IN_PROGRESS)]

        copied = make_engine(copier, clock, recorder).retry_deferred(errors)

        assert copied == 1
        assert errors == []
        assert clock.sleeps == [0.5]
        copier.copy_file.assert_called_once_with(Path("/data/busy.txt"), Path("/backup/data"))
        assert recorder.categories() == ["Re-attempting errors..."]

    def test_gives_up_after_time_budget(self, clock):
        copier = MagicMock()
        copier.copy_file.return_value = CopyOutcome.EXCEPTION
        errors = [make_error("locked.txt", CopyOutcome.EXCEPTION)]

        copied = make_engine(copier, clock).retry_deferred(errors)

        assert copied == 0
        assert len(errors) == 1
        # 500 ms sweeps within a 3000 ms budget
        assert copier.copy_file.call_count == 6
        assert clock.now == pytest.approx(3.0)

    def test_resolves_after_several_sweeps(self, clock):
        copier = MagicMock()
        copier.copy_file.side_effect = [
            CopyOutcome.WRITE_IN_PROGRESS,
            CopyOutcome.WRITE_IN_PROGRESS,
            CopyOutcome.OK,
        ]
        errors = [make_error("busy.txt", CopyOutcome.WRITE_IN_PROGRESS)]

        copied = make_engine(copier, clock).retry_deferred(errors)

        assert copied == 1
        assert errors == []
        assert len(clock.sleeps) == 3

    def test_failure_reclassification_updates_record(self, clock):
        copier = MagicMock()
        copier.copy_file.return_value = CopyOutcome.PATH_TOO_LONG
        error = make_error("deep.txt", CopyOutcome.EXCEPTION)
        first_failure = error.timestamp
        errors = [error]

        copied = make_engine(copier, clock).retry_deferred(errors)

        assert copied == 0
        assert errors == [error]
        assert error.outcome is CopyOutcome.PATH_TOO_LONG
        assert error.timestamp >= first_failure
        # No longer retryable, so only one attempt
        assert copier.copy_file.call_count == 1

    def test_already_backed_up_resolves_without_counting(self, clock):
        copier = MagicMock()
        copier.copy_file.return_value = CopyOutcome.ALREADY_BACKED_UP
        errors = [make_error("done.txt", CopyOutcome.EXCEPTION)]

        copied = make_engine(copier, clock).retry_deferred(errors)

        assert copied == 0
        assert errors == []

    def test_non_retryable_records_stay_untouched(self, clock):
        copier = MagicMock()
        copier.copy_file.return_value = CopyOutcome.OK
        too_long = make_error("deep.txt", CopyOutcome.PATH_TOO_LONG)
        busy = make_error("busy.txt", CopyOutcome.WRITE_IN_PROGRESS)
        errors = [too_long, busy]

        copied = make_engine(copier, clock).retry_deferred(errors)

        assert copied == 1
        assert errors == [too_long]
        copier.copy_file.assert_called_once_with(Path("/data/busy.txt"), Path("/backup/data"))
