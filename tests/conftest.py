# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Fake home and project directories under tmp_path
- PathResolver, adapters and backup manager pointed at them
- A repository whose service availability is controlled by the test
"""

from pathlib import Path

import pytest

from commandsync.core.backup import BackupManager
from commandsync.core.commands.adapters import build_adapters
from commandsync.core.commands.models import Service
from commandsync.core.commands.paths import PathResolver
from commandsync.core.commands.repository import CommandRepository


class FakeAvailability:
    """Availability stand-in with a mutable set of installed services."""

    def __init__(self, installed: set[Service] | None = None) -> None:
        self.installed = set(Service) if installed is None else set(installed)

    def is_installed(self, service: Service) -> bool:
        return service in self.installed


def write_file(path: Path, text: str) -> Path:
    """Create parent directories and write text to path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write():
    """Helper that writes a file, creating parent directories."""
    return write_file


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Empty fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty fake project root."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def paths(home: Path, tmp_path: Path) -> PathResolver:
    return PathResolver(home=home, applications_dir=tmp_path / "Applications")


@pytest.fixture
def backups(tmp_path: Path) -> BackupManager:
    return BackupManager(tmp_path / "backups", keep_count=3)


@pytest.fixture
def availability() -> FakeAvailability:
    return FakeAvailability()


@pytest.fixture
def adapters(paths: PathResolver):
    return build_adapters(paths)


@pytest.fixture
def repository(adapters, availability: FakeAvailability, backups: BackupManager):
    """Repository over the real adapters with every service available."""
    return CommandRepository(adapters, availability, backups)
