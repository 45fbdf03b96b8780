"""Sync module for propagating commands between services.

Provides the single-flight SyncEngine and its configuration enums.
"""

from commandsync.core.sync.engine import ConflictResolution, SyncEngine, SyncStrategy

__all__ = [
    "ConflictResolution",
    "SyncEngine",
    "SyncStrategy",
]
