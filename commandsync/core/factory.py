"""Factory wiring the core components together from settings."""

import logging
from dataclasses import dataclass

from commandsync.config import Settings, settings
from commandsync.core.backup import BackupManager
from commandsync.core.commands.adapters import build_adapters
from commandsync.core.commands.models import Service
from commandsync.core.commands.paths import PathResolver
from commandsync.core.commands.repository import CommandRepository
from commandsync.core.detector import ServiceDetector
from commandsync.core.sync.engine import ConflictResolution, SyncEngine, SyncStrategy

logger = logging.getLogger(__name__)


@dataclass
class CommandSyncContext:
    """Every long-lived component, built once at startup.

    Attributes:
        paths: Shared PathResolver.
        detector: Service availability detector.
        backups: Backup collaborator passed to the repository.
        repository: Command repository.
        engine: Sync engine over the repository.
    """

    paths: PathResolver
    detector: ServiceDetector
    backups: BackupManager
    repository: CommandRepository
    engine: SyncEngine


def parse_services(names: list[str]) -> set[Service]:
    """Convert raw service names to Service members, skipping unknown ones."""
    services = set()
    for name in names:
        try:
            services.add(Service(name))
        except ValueError:
            logger.warning("Ignoring unknown service in configuration: %s", name)
    return services


def build_context(config: Settings | None = None) -> CommandSyncContext:
    """Create the component graph.

    Args:
        config: Settings to use. Defaults to the module settings singleton.

    Returns:
        CommandSyncContext with every component wired up.

    Raises:
        ValueError: If the sync strategy or conflict policy is unknown.
    """
    config = config or settings

    paths = PathResolver(home=config.home_dir, applications_dir=config.applications_dir)
    detector = ServiceDetector(paths)
    backups = BackupManager(config.backup_dir, keep_count=config.backup_keep_count)
    repository = CommandRepository(build_adapters(paths), detector, backups)
    engine = SyncEngine(
        repository,
        sync_strategy=SyncStrategy(config.sync_strategy),
        conflict_resolution=ConflictResolution(config.conflict_resolution),
        enabled_services=parse_services(config.enabled_service_names),
    )

    logger.info("Command sync context ready (home: %s)", paths.home)
    return CommandSyncContext(paths, detector, backups, repository, engine)
