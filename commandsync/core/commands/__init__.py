"""Command module for cross-service command management.

This module provides:
- Command: Data model shared by every service
- Service, CommandScope, ActivationMode: Enums describing a command
- PathResolver: Where each service keeps its commands
- ServiceAdapter and the Claude Code / Cursor / Windsurf adapters
- CommandRepository: In-memory store with linked-service tracking
- Error types raised by the adapters and repository
"""

from commandsync.core.commands.adapters import (
    ClaudeCodeAdapter,
    CursorAdapter,
    ServiceAdapter,
    WindsurfAdapter,
    build_adapters,
)
from commandsync.core.commands.errors import (
    AdapterNotFoundError,
    CommandIOError,
    CommandNotFoundError,
    CommandSyncError,
    CommandValidationError,
    NoBackupFoundError,
)
from commandsync.core.commands.models import (
    ActivationMode,
    Command,
    CommandScope,
    Service,
    is_valid_name,
)
from commandsync.core.commands.paths import PathResolver
from commandsync.core.commands.repository import (
    CommandRepository,
    SyncFailure,
    SyncReport,
)

__all__ = [
    "ActivationMode",
    "AdapterNotFoundError",
    "ClaudeCodeAdapter",
    "Command",
    "CommandIOError",
    "CommandNotFoundError",
    "CommandRepository",
    "CommandScope",
    "CommandSyncError",
    "CommandValidationError",
    "CursorAdapter",
    "NoBackupFoundError",
    "PathResolver",
    "Service",
    "ServiceAdapter",
    "SyncFailure",
    "SyncReport",
    "WindsurfAdapter",
    "build_adapters",
    "is_valid_name",
]
