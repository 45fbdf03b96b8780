# commandsync/core/backup.py
"""Timestamped backups of command files.

BackupManager is constructed once at startup and handed to whichever layer
overwrites command files. It keeps the newest ``keep_count`` copies per
original file and prunes the rest after each backup.

Backup names carry a short digest of the original's directory, so files
that share a name across services (``~/.claude/commands/review.md`` and
``~/.cursor/commands/review.md``) keep separate histories.
"""

import hashlib
import logging
import os
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path

from commandsync.core.commands.errors import CommandIOError, NoBackupFoundError

logger = logging.getLogger(__name__)

# 2026-10-19T08-15-02.123456Z
_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S.%fZ"
_TIMESTAMP_PATTERN = r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{6}Z"


def location_digest(path: Path) -> str:
    """Get an 8 character digest of the directory holding path."""
    directory = os.path.normpath(os.path.abspath(path.parent))
    return hashlib.sha256(directory.encode("utf-8")).hexdigest()[:8]


class BackupManager:
    """Copies files into a backup directory before they are overwritten.

    Attributes:
        backup_dir: Directory holding every backup copy.
        keep_count: Number of backups retained per original file.

    Example:
        >>> backups = BackupManager(Path("/tmp/cs-backups"), keep_count=5)
        >>> backups.backup(Path("/home/dev/.claude/commands/review.md"))
        PosixPath('/tmp/cs-backups/review_3f2a9c1e_2026-10-19T08-15-02.123456Z.md')
    """

    def __init__(self, backup_dir: Path | str, keep_count: int = 10) -> None:
        """Initialize the BackupManager.

        Creates the backup directory if it doesn't exist.

        Args:
            backup_dir: Directory for backup copies.
            keep_count: Backups kept per original file (at least 1).
        """
        if keep_count < 1:
            raise ValueError("keep_count must be at least 1")
        self.backup_dir = Path(backup_dir)
        self.keep_count = keep_count
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _backup_name(self, path: Path, stamp: datetime) -> str:
        timestamp = stamp.strftime(_TIMESTAMP_FORMAT)
        return f"{path.stem}_{location_digest(path)}_{timestamp}{path.suffix}"

    def backup(self, path: Path | str) -> Path:
        """Copy a file into the backup directory.

        Args:
            path: File about to be overwritten.

        Returns:
            Path of the new backup, or path itself when there is nothing to
            back up yet.

        Raises:
            CommandIOError: If the copy fails.
        """
        source = Path(path)
        if not source.is_file():
            return source

        target = self.backup_dir / self._backup_name(source, datetime.now(timezone.utc))
        try:
            shutil.copy2(source, target)
        except OSError as e:
            raise CommandIOError(f"Failed to back up {source}: {e}", path=str(source)) from e

        logger.info("Backed up %s to %s", source, target)
        self._prune(source)
        return target

    def backups_for(self, path: Path | str) -> list[Path]:
        """List backups of one original file, newest first.

        Name, extension and directory must all match, so ``review.md`` has
        a history separate from ``review_old.md``, ``review.mdc`` and a
        ``review.md`` in another directory.
        """
        if not self.backup_dir.is_dir():
            return []
        original = Path(path)
        prefix = re.escape(f"{original.stem}_{location_digest(original)}_")
        pattern = re.compile(rf"{prefix}({_TIMESTAMP_PATTERN}){re.escape(original.suffix)}")
        matches = []
        for entry in self.backup_dir.iterdir():
            found = pattern.fullmatch(entry.name)
            if found and entry.is_file():
                matches.append((found.group(1), entry))
        matches.sort(key=lambda item: item[0], reverse=True)
        return [entry for _, entry in matches]

    def restore(self, original_path: Path | str) -> Path:
        """Replace a file with its most recent backup.

        Args:
            original_path: File to restore.

        Returns:
            The backup that was restored.

        Raises:
            NoBackupFoundError: If no backup exists for the file.
            CommandIOError: If the copy fails.
        """
        original = Path(original_path)
        backups = self.backups_for(original)
        if not backups:
            raise NoBackupFoundError(str(original))

        latest = backups[0]
        try:
            original.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(latest, original)
        except OSError as e:
            raise CommandIOError(
                f"Failed to restore {original}: {e}", path=str(original)
            ) from e

        logger.info("Restored %s from %s", original, latest)
        return latest

    def _prune(self, path: Path) -> None:
        for stale in self.backups_for(path)[self.keep_count :]:
            try:
                stale.unlink()
            except OSError as e:
                logger.warning("Failed to prune backup %s: %s", stale, e)

    def total_size(self) -> int:
        """Get the combined size in bytes of every backup."""
        if not self.backup_dir.is_dir():
            return 0
        return sum(p.stat().st_size for p in self.backup_dir.iterdir() if p.is_file())

    def clear_all(self) -> int:
        """Delete every backup.

        Returns:
            Number of files removed.
        """
        removed = 0
        for entry in self.backup_dir.iterdir():
            if entry.is_file():
                entry.unlink()
                removed += 1
        logger.info("Cleared %d backups", removed)
        return removed
