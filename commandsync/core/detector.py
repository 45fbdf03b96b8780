# commandsync/core/detector.py
"""Detect which services are installed on this host."""

import logging
from dataclasses import dataclass
from pathlib import Path

from commandsync.core.commands.models import Service
from commandsync.core.commands.paths import LocationKind, PathResolver

logger = logging.getLogger(__name__)


@dataclass
class ServiceInfo:
    """Summary of one service on this host.

    Attributes:
        is_installed: Whether the service was detected.
        user_commands_path: User-scope location, None when not installed.
        user_command_count: Number of user-scope command files found.
    """

    is_installed: bool
    user_commands_path: Path | None
    user_command_count: int


class ServiceDetector:
    """Checks marker files and directories for each service.

    The repository consults is_installed() before touching a service's
    adapter, so an absent tool is skipped instead of reported as an error.
    """

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths
        self.installed_services: set[Service] = set()
        self.service_info: dict[Service, ServiceInfo] = {}
        self.refresh()

    def refresh(self) -> None:
        """Re-run detection for every service."""
        for service in Service:
            if self._check_installed(service):
                self.installed_services.add(service)
            else:
                self.installed_services.discard(service)
            self.service_info[service] = self._service_info(service)

        logger.info(
            "Detected services: %s",
            ", ".join(sorted(s.value for s in self.installed_services)) or "none",
        )

    def is_installed(self, service: Service) -> bool:
        return service in self.installed_services

    def _check_installed(self, service: Service) -> bool:
        if service is Service.CLAUDE_CODE:
            if self.paths.config_dir(service).exists():
                return True
            return any(p.exists() for p in self.paths.claude_binary_candidates())

        markers = [self.paths.app_bundle(service), self.paths.config_dir(service)]
        if service is Service.CURSOR:
            markers.append(self.paths.cursor_support_dir)
        return any(marker is not None and marker.exists() for marker in markers)

    def _service_info(self, service: Service) -> ServiceInfo:
        if not self.is_installed(service):
            return ServiceInfo(False, None, 0)

        location = self.paths.user_location(service)
        if location.kind is LocationKind.FILE:
            count = 1 if location.path.is_file() else 0
        else:
            count = self._count_commands(location.path)
        return ServiceInfo(True, location.path, count)

    @staticmethod
    def _count_commands(directory: Path) -> int:
        if not directory.is_dir():
            return 0
        try:
            return sum(1 for p in directory.iterdir() if p.suffix == ".md")
        except OSError as e:
            logger.warning("Failed to count commands in %s: %s", directory, e)
            return 0
