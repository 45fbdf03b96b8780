# tests/test_backup.py
"""Tests for BackupManager."""

import re
from pathlib import Path

import pytest

from commandsync.core.backup import BackupManager
from commandsync.core.commands.errors import NoBackupFoundError


class TestBackup:
    """Tests for creating and pruning backups."""

    def test_creates_backup_dir(self, tmp_path: Path) -> None:
        BackupManager(tmp_path / "nested" / "backups")
        assert (tmp_path / "nested" / "backups").is_dir()

    def test_rejects_zero_keep_count(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            BackupManager(tmp_path, keep_count=0)

    def test_backup_name_format(self, backups: BackupManager, tmp_path: Path, write) -> None:
        source = write(tmp_path / "review.md", "v1")

        backup = backups.backup(source)

        assert re.fullmatch(
            r"review_[0-9a-f]{8}_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{6}Z\.md", backup.name
        )
        assert backup.read_text() == "v1"
        assert ":" not in backup.name

    def test_missing_source_is_returned_unchanged(
        self, backups: BackupManager, tmp_path: Path
    ) -> None:
        missing = tmp_path / "nope.md"
        assert backups.backup(missing) == missing
        assert backups.backups_for(missing) == []

    def test_prunes_to_keep_count(self, backups: BackupManager, tmp_path: Path, write) -> None:
        source = tmp_path / "review.md"
        for version in range(5):
            write(source, f"v{version}")
            backups.backup(source)

        kept = backups.backups_for(source)
        assert len(kept) == backups.keep_count
        assert kept[0].read_text() == "v4"

    def test_backups_for_matches_exact_stem(
        self, backups: BackupManager, tmp_path: Path, write
    ) -> None:
        review = write(tmp_path / "review.md", "a")
        review_old = write(tmp_path / "review_old.md", "b")
        backups.backup(review)
        backups.backup(review_old)

        assert len(backups.backups_for(review)) == 1
        assert len(backups.backups_for(review_old)) == 1
        assert backups.backups_for(tmp_path / "review.mdc") == []

    def test_same_name_in_other_directory_has_own_history(
        self, backups: BackupManager, tmp_path: Path, write
    ) -> None:
        claude = tmp_path / ".claude" / "commands" / "review.md"
        cursor = tmp_path / ".cursor" / "commands" / "review.md"
        backups.backup(write(claude, "claude v1"))
        for version in range(5):
            backups.backup(write(cursor, f"cursor v{version}"))

        (claude_backup,) = backups.backups_for(claude)
        assert claude_backup.read_text() == "claude v1"
        assert len(backups.backups_for(cursor)) == backups.keep_count

        write(claude, "broken")
        backups.restore(claude)
        assert claude.read_text() == "claude v1"


class TestRestore:
    """Tests for BackupManager.restore."""

    def test_restores_latest(self, backups: BackupManager, tmp_path: Path, write) -> None:
        source = write(tmp_path / "rules.md", "v1")
        backups.backup(source)
        write(source, "v2")
        latest = backups.backup(source)
        write(source, "broken")

        used = backups.restore(source)

        assert used == latest
        assert source.read_text() == "v2"

    def test_restore_recreates_deleted_file(
        self, backups: BackupManager, tmp_path: Path, write
    ) -> None:
        source = write(tmp_path / "sub" / "x.md", "keep me")
        backups.backup(source)
        source.unlink()

        backups.restore(source)

        assert source.read_text() == "keep me"

    def test_no_backup(self, backups: BackupManager, tmp_path: Path) -> None:
        with pytest.raises(NoBackupFoundError):
            backups.restore(tmp_path / "never.md")


class TestMaintenance:
    """Tests for size reporting and clearing."""

    def test_total_size_and_clear(self, backups: BackupManager, tmp_path: Path, write) -> None:
        backups.backup(write(tmp_path / "a.md", "12345"))
        backups.backup(write(tmp_path / "b.md", "123"))

        assert backups.total_size() == 8
        assert backups.clear_all() == 2
        assert backups.total_size() == 0
