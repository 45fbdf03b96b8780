# commandsync/core/commands/repository.py
"""In-memory command repository backed by the service adapters.

This module provides loading, filtering and mutation of every command
across services. File I/O always happens before the in-memory list is
changed, so a failed write leaves the repository untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from commandsync.core.commands.adapters import ServiceAdapter
from commandsync.core.commands.errors import (
    AdapterNotFoundError,
    CommandIOError,
    CommandSyncError,
)
from commandsync.core.commands.models import (
    Command,
    CommandScope,
    Service,
    validate_name,
)
from commandsync.utils.logging import command_fields

if TYPE_CHECKING:
    from commandsync.core.backup import BackupManager

logger = logging.getLogger(__name__)

_LinkKey = tuple[tuple, Service]


class Availability(Protocol):
    """Anything that can tell whether a service is present on this host."""

    def is_installed(self, service: Service) -> bool: ...


@dataclass
class SyncFailure:
    """One command that could not be copied during a bulk sync."""

    command_name: str
    error: str


@dataclass
class SyncReport:
    """Outcome of a bulk copy between two services.

    Attributes:
        source: Service the commands were copied from.
        target: Service the commands were copied to.
        synced: Names of commands written successfully.
        failures: Commands that failed, with their error messages.
    """

    source: Service
    target: Service
    synced: list[str] = field(default_factory=list)
    failures: list[SyncFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class CommandRepository:
    """Repository holding every loaded command.

    Keeps the authoritative list of commands plus a cache of linked
    services (other services holding the same logical command). The cache
    is cleared on every mutation.

    Attributes:
        adapters: Adapter per service.
        availability: Detector consulted before any adapter call.
        backups: Backup collaborator invoked before overwrites, or None.
        is_loading: True while load_all() runs.
        error: Summary of the last load_all() failures, or None.

    Example:
        >>> repo = CommandRepository(build_adapters(paths), detector, backups)
        >>> await repo.load_all()
        >>> for cmd in repo.commands_for(Service.CURSOR, CommandScope.USER):
        ...     print(cmd.name, repo.synced_services(cmd))
    """

    def __init__(
        self,
        adapters: dict[Service, ServiceAdapter],
        availability: Availability,
        backups: BackupManager | None = None,
    ) -> None:
        self.adapters = adapters
        self.availability = availability
        self.backups = backups
        self.is_loading = False
        self.error: str | None = None
        self._commands: list[Command] = []
        self._link_cache: dict[_LinkKey, list[Service]] = {}

    @property
    def commands(self) -> list[Command]:
        """Get a snapshot of every loaded command."""
        return list(self._commands)

    def _invalidate(self) -> None:
        self._link_cache.clear()

    def _adapter_for(self, service: Service) -> ServiceAdapter:
        adapter = self.adapters.get(service)
        if adapter is None:
            raise AdapterNotFoundError(service)
        return adapter

    def _available_adapters(self) -> list[tuple[Service, ServiceAdapter]]:
        return [
            (service, self.adapters[service])
            for service in Service
            if service in self.adapters and self.availability.is_installed(service)
        ]

    def _index_of(self, command_id: str) -> int | None:
        for index, existing in enumerate(self._commands):
            if existing.id == command_id:
                return index
        return None

    def _backup_path(self, path: Path | str | None) -> None:
        if self.backups is not None and path:
            self.backups.backup(path)

    def _record(self, command: Command) -> None:
        """Put a freshly written command into the in-memory list.

        Replaces the entry with the same id, or appends. Any other entry of
        the same service backed by the same file was just overwritten and
        is dropped.
        """
        self._commands = [
            c
            for c in self._commands
            if c.id == command.id
            or c.source_service is not command.source_service
            or c.file_path != command.file_path
        ]
        index = self._index_of(command.id)
        if index is not None:
            self._commands[index] = command
        else:
            self._commands.append(command)
        self._invalidate()

    # Loading

    async def load_all(self) -> None:
        """Reload user-scope commands from every available service.

        A failing service is logged and skipped; the others still load.
        """
        self.is_loading = True
        self.error = None
        loaded: list[Command] = []
        failed: list[str] = []

        try:
            for service, adapter in self._available_adapters():
                try:
                    loaded.extend(await adapter.load_user_commands())
                except OSError as e:
                    logger.error("Error loading %s user commands: %s", service.value, e)
                    failed.append(service.display_name)

            self._commands = loaded
            self._invalidate()
        finally:
            self.is_loading = False

        if failed:
            self.error = f"Failed to load commands from {', '.join(failed)}"
        logger.info("Loaded %d user commands", len(loaded))

    async def load_project_commands(self, project_root: Path | str) -> None:
        """Load project-scope commands and merge them in.

        Commands whose id is already present are skipped, so the first
        loaded copy wins.

        Args:
            project_root: Root directory of the project.
        """
        added = 0
        for service, adapter in self._available_adapters():
            try:
                project_commands = await adapter.load_project_commands(project_root)
            except OSError as e:
                logger.error(
                    "Error loading %s project commands from %s: %s",
                    service.value,
                    project_root,
                    e,
                )
                continue

            existing_ids = {c.id for c in self._commands}
            new_commands = [c for c in project_commands if c.id not in existing_ids]
            self._commands.extend(new_commands)
            added += len(new_commands)

        self._invalidate()
        logger.info("Loaded %d project commands from %s", added, project_root)

    # Queries

    def get(self, command_id: str) -> Command | None:
        index = self._index_of(command_id)
        return self._commands[index] if index is not None else None

    def commands_for(self, service: Service | None, scope: CommandScope) -> list[Command]:
        """Filter commands by scope and, optionally, owning service.

        Args:
            service: Owning service, or None for every service.
            scope: Scope to keep.

        Returns:
            Matching commands sorted by name.
        """
        matches = [
            c
            for c in self._commands
            if c.scope is scope and (service is None or c.source_service is service)
        ]
        return sorted(matches, key=lambda c: c.name)

    def search(self, query: str) -> list[Command]:
        """Case-insensitive search over name, description and content.

        An empty query returns every command.
        """
        if not query:
            return self.commands
        needle = query.lower()
        return [
            c
            for c in self._commands
            if needle in c.name.lower()
            or needle in c.description.lower()
            or needle in c.content.lower()
        ]

    def linked_commands(self, command: Command) -> list[Command]:
        """Get copies of the same logical command owned by other services."""
        return [
            c
            for c in self._commands
            if c.source_service is not command.source_service
            and c.is_same_command(command)
        ]

    def synced_services(self, command: Command) -> list[Service]:
        """Get the other services holding this command, sorted and unique.

        Served from the linkage cache, which every mutation clears.
        """
        key = (command.match_key(), command.source_service)
        cached = self._link_cache.get(key)
        if cached is None:
            services = {c.source_service for c in self.linked_commands(command)}
            cached = sorted(services, key=lambda s: s.value)
            self._link_cache[key] = cached
        return list(cached)

    # Mutations

    async def add(self, command: Command) -> Command:
        """Save a new command and add it to the repository.

        Raises:
            CommandValidationError: If the name is invalid.
            AdapterNotFoundError: If no adapter handles its service.
            CommandIOError: If the backup or write fails.
        """
        validate_name(command.name)
        adapter = self._adapter_for(command.source_service)

        self._backup_path(adapter.target_path(command))
        await adapter.save_command(command)

        self._record(command)
        logger.info(
            "Added %s command '%s'",
            command.source_service.value,
            command.name,
            extra=command_fields(command),
        )
        return command

    async def update(self, command: Command) -> Command:
        """Save changes to an existing command.

        Raises:
            CommandValidationError: If the name is invalid.
            AdapterNotFoundError: If no adapter handles its service.
            CommandIOError: If the backup or write fails.
        """
        validate_name(command.name)
        adapter = self._adapter_for(command.source_service)

        self._backup_path(adapter.target_path(command))
        await adapter.save_command(command)

        self._record(command)
        logger.info(
            "Updated %s command '%s'",
            command.source_service.value,
            command.name,
            extra=command_fields(command),
        )
        return command

    async def delete(self, command: Command) -> None:
        """Delete a command's file and drop it from the repository.

        The file is backed up first so it can still be restored.

        Raises:
            AdapterNotFoundError: If no adapter handles its service.
            CommandIOError: If the backup or removal fails.
        """
        adapter = self._adapter_for(command.source_service)

        self._backup_path(command.file_path)
        await adapter.delete_command(command)

        self._commands = [c for c in self._commands if c.id != command.id]
        self._invalidate()
        logger.info(
            "Deleted %s command '%s'",
            command.source_service.value,
            command.name,
            extra=command_fields(command),
        )

    async def rename(self, command: Command, new_name: str) -> Command:
        """Rename a command by writing the new file, then removing the old one.

        If the old file cannot be removed, the new file is deleted again so
        the command is never left under both names.

        Args:
            command: Command to rename.
            new_name: New command name.

        Returns:
            The renamed command, which keeps the original id.

        Raises:
            CommandValidationError: If new_name is invalid.
            AdapterNotFoundError: If no adapter handles its service.
            CommandIOError: If either file operation fails.
        """
        validate_name(new_name)
        adapter = self._adapter_for(command.source_service)

        renamed = replace(command, name=new_name, file_path=None)
        self._backup_path(adapter.target_path(renamed))
        self._backup_path(command.file_path)
        await adapter.save_command(renamed)

        if renamed.file_path != command.file_path:
            try:
                await adapter.delete_command(command)
            except CommandIOError:
                logger.error(
                    "Rolling back rename of '%s' to '%s'",
                    command.name,
                    new_name,
                    extra=command_fields(renamed),
                )
                await adapter.delete_command(renamed)
                raise

        self._record(renamed)
        logger.info(
            "Renamed %s command '%s' to '%s'",
            command.source_service.value,
            command.name,
            new_name,
            extra=command_fields(renamed),
        )
        return renamed

    async def _write_to_service(self, command: Command, service: Service) -> Command:
        """Write command's fields into one target service.

        Overwrites the target's matching copy when there is one, otherwise
        appends a new command.
        """
        adapter = self._adapter_for(service)
        existing = next(
            (
                c
                for c in self._commands
                if c.source_service is service and c.is_same_command(command)
            ),
            None,
        )

        target = command.retarget(service)
        if existing is not None:
            target.id = existing.id
            target.file_path = existing.file_path

        self._backup_path(adapter.target_path(target))
        await adapter.save_command(target)

        self._record(target)
        return target

    async def sync_to_services(
        self, command: Command, services: Iterable[Service]
    ) -> list[Command]:
        """Copy a command into every target service except its own.

        Args:
            command: Command to propagate.
            services: Target services.

        Returns:
            The written copies.

        Raises:
            CommandValidationError: If the name is invalid.
            AdapterNotFoundError: If a target has no adapter.
            CommandIOError: On the first failing write.
        """
        validate_name(command.name)
        written = []
        for service in sorted(set(services), key=lambda s: s.value):
            if service is command.source_service:
                continue
            written.append(await self._write_to_service(command, service))
            logger.info(
                "Synced '%s' from %s to %s",
                command.name,
                command.source_service.value,
                service.value,
                extra=command_fields(written[-1]),
            )
        return written

    async def sync_all_to_service(self, target: Service, source: Service) -> SyncReport:
        """Copy every command owned by source into target.

        Each command is copied independently; a failure is recorded and the
        run continues with the next command.

        Raises:
            AdapterNotFoundError: If target has no adapter.
        """
        report = SyncReport(source=source, target=target)
        self._adapter_for(target)

        for command in [c for c in self._commands if c.source_service is source]:
            try:
                validate_name(command.name)
                await self._write_to_service(command, target)
                report.synced.append(command.name)
            except (CommandSyncError, OSError) as e:
                logger.error(
                    "Failed to sync '%s' from %s to %s: %s",
                    command.name,
                    source.value,
                    target.value,
                    e,
                    extra=command_fields(command, service=target),
                )
                report.failures.append(SyncFailure(command.name, str(e)))

        logger.info(
            "Synced %d commands from %s to %s (%d failed)",
            len(report.synced),
            source.value,
            target.value,
            len(report.failures),
        )
        return report

    async def update_command_services(
        self, command: Command, services: Iterable[Service]
    ) -> None:
        """Make exactly the given services hold this command.

        The command is written (with its current fields) to every selected
        service and removed from linked services that are no longer
        selected. An empty selection does nothing.
        """
        selected = set(services)
        if not selected:
            return
        validate_name(command.name)

        linked = self.linked_commands(command)

        if command.source_service in selected:
            await self.update(command)
        others = selected - {command.source_service}
        if others:
            await self.sync_to_services(command, others)

        for copy in linked:
            if copy.source_service not in selected:
                await self.delete(copy)
        if command.source_service not in selected:
            await self.delete(command)

    async def delete_from_all_services(self, command: Command) -> None:
        """Delete a command and every linked copy in other services."""
        for copy in self.linked_commands(command):
            await self.delete(copy)
        await self.delete(command)
