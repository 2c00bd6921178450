"""Unit tests for FileCopier copy decisions."""

import errno
import os
import stat
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from backupkit.models import BackupSettings, CopyOutcome
from backupkit.operations import FileCopier
from backupkit.operations.file_copier import is_path_too_long


@pytest.fixture
def source_file(temp_dir: Path) -> Path:
    """Create a source file last written an hour ago."""
    path = temp_dir / "src" / "report.txt"
    path.parent.mkdir()
    path.write_text("quarterly numbers")
    an_hour_ago = time.time() - 3600
    os.utime(path, (an_hour_ago, an_hour_ago))
    return path


@pytest.fixture
def copier(recorder) -> FileCopier:
    return FileCopier(BackupSettings(min_file_write_wait_ms=500), log=recorder)


@pytest.mark.unit
class TestCopyDecisions:
    """Tests for the per-file decision order."""

    def test_copies_new_file_and_preserves_timestamp(self, copier, source_file, temp_dir, recorder):
        target_dir = temp_dir / "backup" / "src"

        outcome = copier.copy_file(source_file, target_dir)

        target = target_dir / "report.txt"
        assert outcome is CopyOutcome.OK
        assert target.read_text() == "quarterly numbers"
        assert target.stat().st_mtime_ns == source_file.stat().st_mtime_ns
        assert ("COPYING", str(source_file)) in recorder.events

    def test_second_copy_is_already_backed_up(self, copier, source_file, temp_dir, recorder):
        target_dir = temp_dir / "backup"
        copier.copy_file(source_file, target_dir)
        recorder.events.clear()

        outcome = copier.copy_file(source_file, target_dir)

        assert outcome is CopyOutcome.ALREADY_BACKED_UP
        assert recorder.events == []

    def test_changed_timestamp_is_copied_again(self, copier, source_file, temp_dir):
        target_dir = temp_dir / "backup"
        copier.copy_file(source_file, target_dir)

        source_file.write_text("revised numbers")
        two_hours_ago = time.time() - 7200
        os.utime(source_file, (two_hours_ago, two_hours_ago))

        assert copier.copy_file(source_file, target_dir) is CopyOutcome.OK
        assert (target_dir / "report.txt").read_text() == "revised numbers"

    def test_excluded_type_is_ineligible(self, source_file, temp_dir):
        copier = FileCopier(BackupSettings(excluded_types=["txt"]))

        outcome = copier.copy_file(source_file, temp_dir / "backup")

        assert outcome is CopyOutcome.INELIGIBLE
        assert not (temp_dir / "backup").exists()

    def test_inherited_hidden_is_ineligible(self, copier, source_file, temp_dir):
        outcome = copier.copy_file(source_file, temp_dir / "backup", inherited_hidden=True)
        assert outcome is CopyOutcome.INELIGIBLE

    def test_recent_write_is_in_progress(self, source_file, temp_dir):
        mtime = source_file.stat().st_mtime
        copier = FileCopier(
            BackupSettings(min_file_write_wait_ms=500),
            clock=lambda: mtime + 0.1,
        )

        outcome = copier.copy_file(source_file, temp_dir / "backup")

        assert outcome is CopyOutcome.WRITE_IN_PROGRESS
        assert not (temp_dir / "backup" / "report.txt").exists()

    def test_quiet_file_is_copied(self, source_file, temp_dir):
        mtime = source_file.stat().st_mtime
        copier = FileCopier(
            BackupSettings(min_file_write_wait_ms=500),
            clock=lambda: mtime + 0.6,
        )

        assert copier.copy_file(source_file, temp_dir / "backup") is CopyOutcome.OK

    def test_missing_source_is_exception(self, copier, temp_dir, recorder):
        outcome = copier.copy_file(temp_dir / "gone.txt", temp_dir / "backup")

        assert outcome is CopyOutcome.EXCEPTION
        assert "ERROR" in recorder.categories()


@pytest.mark.unit
class TestCopyFailures:
    """Tests for failure classification and read-only targets."""

    def test_path_too_long_is_classified(self, copier, source_file, temp_dir):
        error = OSError(errno.ENAMETOOLONG, "File name too long")

        with patch("backupkit.operations.file_copier.shutil.copy2", side_effect=error):
            outcome = copier.copy_file(source_file, temp_dir / "backup")

        assert outcome is CopyOutcome.PATH_TOO_LONG

    def test_other_os_error_is_exception(self, copier, source_file, temp_dir, recorder):
        error = PermissionError(errno.EACCES, "Permission denied")

        with patch("backupkit.operations.file_copier.shutil.copy2", side_effect=error):
            outcome = copier.copy_file(source_file, temp_dir / "backup")

        assert outcome is CopyOutcome.EXCEPTION
        assert recorder.categories() == ["COPYING", "ERROR"]

    def test_read_only_target_is_overwritten(self, copier, source_file, temp_dir):
        target_dir = temp_dir / "backup"
        target_dir.mkdir()
        target = target_dir / "report.txt"
        target.write_text("stale")
        os.chmod(target, stat.S_IREAD)

        try:
            outcome = copier.copy_file(source_file, target_dir)

            assert outcome is CopyOutcome.OK
            assert target.read_text() == "quarterly numbers"
        finally:
            os.chmod(target, stat.S_IREAD | stat.S_IWRITE)

    def test_directory_at_target_path_is_exception(self, copier, source_file, temp_dir, recorder):
        target_dir = temp_dir / "backup"
        occupied = target_dir / "report.txt"
        occupied.mkdir(parents=True)

        outcome = copier.copy_file(source_file, target_dir)

        assert outcome is CopyOutcome.EXCEPTION
        assert recorder.categories() == ["COPYING", "ERROR"]
        assert list(occupied.iterdir()) == []

    def test_is_path_too_long(self):
        assert is_path_too_long(OSError(errno.ENAMETOOLONG, "too long"))
        assert not is_path_too_long(OSError(errno.ENOENT, "missing"))

        windows_error = OSError(errno.EINVAL, "too long")
        windows_error.winerror = 206
        assert is_path_too_long(windows_error)


@pytest.mark.unit
@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
class TestTargetDirectories:
    """Tests for target directories created by the copier."""

    def test_new_directory_takes_source_permissions(self, copier, source_file, temp_dir):
        os.chmod(source_file.parent, 0o750)
        target_dir = temp_dir / "backup" / "src"

        copier.copy_file(source_file, target_dir)

        assert stat.S_IMODE(target_dir.stat().st_mode) == 0o750

    def test_owner_keeps_access_to_read_only_source_directory(self, copier, source_file, temp_dir):
        os.chmod(source_file.parent, 0o555)
        target_dir = temp_dir / "backup" / "src"

        try:
            outcome = copier.copy_file(source_file, target_dir)
        finally:
            os.chmod(source_file.parent, 0o755)

        assert outcome is CopyOutcome.OK
        assert stat.S_IMODE(target_dir.stat().st_mode) == 0o755
        assert (target_dir / "report.txt").is_file()
