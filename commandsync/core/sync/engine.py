# commandsync/core/sync/engine.py
"""Sync engine that propagates commands between services.

Only one sync runs at a time: a call made while another is in flight
returns immediately without doing anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from commandsync.core.commands.models import Command, Service
from commandsync.core.commands.repository import CommandRepository, SyncReport

logger = logging.getLogger(__name__)


class SyncStrategy(str, Enum):
    """When the surrounding application triggers a sync."""

    MANUAL = "manual"
    ON_CHANGE = "on_change"


class ConflictResolution(str, Enum):
    """Preferred winner when two copies diverge.

    Recorded for the surrounding application; propagation itself always
    overwrites the target copy.
    """

    NEWER_WINS = "newer_wins"
    SOURCE_WINS = "source_wins"
    ASK_USER = "ask_user"


class SyncEngine:
    """Single-flight orchestration over a CommandRepository.

    Attributes:
        repository: Repository that performs the actual writes.
        sync_strategy: Configured trigger strategy.
        conflict_resolution: Configured conflict policy (advisory).
        enabled_services: Services allowed to take part in syncs.
        is_syncing: True while a sync is in flight.
        last_sync_date: Completion time of the last successful sync.
        sync_error: Message describing the last failure, if any.

    Example:
        >>> engine = SyncEngine(repo)
        >>> await engine.sync_command(cmd, {Service.CURSOR, Service.WINDSURF})
    """

    def __init__(
        self,
        repository: CommandRepository,
        sync_strategy: SyncStrategy = SyncStrategy.MANUAL,
        conflict_resolution: ConflictResolution = ConflictResolution.NEWER_WINS,
        enabled_services: Iterable[Service] | None = None,
    ) -> None:
        self.repository = repository
        self.sync_strategy = sync_strategy
        self.conflict_resolution = conflict_resolution
        self.enabled_services: set[Service] = (
            set(enabled_services) if enabled_services is not None else set(Service)
        )
        self.is_syncing = False
        self.last_sync_date: datetime | None = None
        self.sync_error: str | None = None

    def toggle_service(self, service: Service, enabled: bool) -> None:
        """Enable or disable a service for future syncs."""
        if enabled:
            self.enabled_services.add(service)
        else:
            self.enabled_services.discard(service)
        logger.info("Service %s %s for sync", service.value, "enabled" if enabled else "disabled")

    def target_services(self, command: Command, services: Iterable[Service]) -> set[Service]:
        """Get the services a sync of command would actually write to."""
        return (set(services) & self.enabled_services) - {command.source_service}

    async def sync_command(
        self, command: Command, services: Iterable[Service]
    ) -> list[Command] | None:
        """Copy one command into the given services.

        The command's own service and disabled services are dropped from
        the targets; an empty target set is a no-op.

        Args:
            command: Command to propagate.
            services: Requested target services.

        Returns:
            The written copies, or None when another sync was in flight.

        Raises:
            CommandSyncError: If a write fails; recorded in sync_error too.
        """
        if self.is_syncing:
            logger.debug("Sync already in progress, ignoring sync of '%s'", command.name)
            return None

        targets = self.target_services(command, services)
        if not targets:
            return []

        self.is_syncing = True
        self.sync_error = None
        try:
            written = await self.repository.sync_to_services(command, targets)
            self.last_sync_date = datetime.now()
            return written
        except Exception as e:
            self.sync_error = str(e)
            logger.error("Sync of '%s' failed: %s", command.name, e)
            raise
        finally:
            self.is_syncing = False

    async def sync_all(self, source: Service, target: Service) -> SyncReport | None:
        """Copy every command of source into target.

        Both services must be enabled. Individual failures do not stop the
        run; they are listed in the report and summarized in sync_error.

        Returns:
            SyncReport, or None when skipped (sync in flight or a service
            disabled).
        """
        if self.is_syncing:
            logger.debug("Sync already in progress, ignoring bulk sync")
            return None
        if source not in self.enabled_services or target not in self.enabled_services:
            logger.info(
                "Skipping bulk sync %s -> %s: service disabled", source.value, target.value
            )
            return None

        self.is_syncing = True
        self.sync_error = None
        try:
            report = await self.repository.sync_all_to_service(target, source)
        except Exception as e:
            self.sync_error = str(e)
            logger.error("Bulk sync %s -> %s failed: %s", source.value, target.value, e)
            raise
        finally:
            self.is_syncing = False

        self.last_sync_date = datetime.now()
        if report.failures:
            self.sync_error = (
                f"{len(report.failures)} command(s) failed to sync to "
                f"{target.display_name}"
            )
        return report
