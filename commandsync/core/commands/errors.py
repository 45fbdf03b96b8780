# commandsync/core/commands/errors.py
"""Error taxonomy for command loading, saving and syncing."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from commandsync.core.commands.models import Service


class CommandSyncError(Exception):
    """Base class for every error raised by the command core."""


class AdapterNotFoundError(CommandSyncError):
    """Raised when no adapter is registered for a service.

    This points at a configuration gap rather than a user mistake.
    """

    def __init__(self, service: Service):
        super().__init__(f"No adapter registered for service '{service.value}'")
        self.service = service


class CommandIOError(CommandSyncError, OSError):
    """Raised when a command file cannot be read, written or deleted."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class CommandValidationError(CommandSyncError, ValueError):
    """Raised when a command fails validation (e.g. an illegal name)."""

    def __init__(self, message: str, field: str = "name"):
        super().__init__(message)
        self.field = field


class NoBackupFoundError(CommandSyncError):
    """Raised when a restore is attempted and no backup exists."""

    def __init__(self, path: str):
        super().__init__(f"No backup found for {path}")
        self.path = path


class CommandNotFoundError(CommandSyncError):
    """Raised when a command id is not present in the repository."""

    def __init__(self, command_id: str):
        super().__init__(f"Command '{command_id}' not found")
        self.command_id = command_id
