# tests/test_config.py
"""Tests for settings loading and context wiring."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from commandsync.config import Settings
from commandsync.core.commands.models import Service
from commandsync.core.factory import build_context, parse_services
from commandsync.core.sync.engine import ConflictResolution, SyncStrategy


class TestSettings:
    """Tests for Settings."""

    def test_environment_overrides(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME_DIR", str(tmp_path))
        monkeypatch.setenv("ENABLED_SERVICES", " Claude , cursor,,")
        monkeypatch.setenv("SYNC_STRATEGY", "on_change")

        config = Settings()

        assert config.home_dir == tmp_path
        assert config.enabled_service_names == ["claude", "cursor"]
        assert config.sync_strategy == "on_change"

    def test_keep_count_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(backup_keep_count=0)


class TestFactory:
    """Tests for build_context and parse_services."""

    def test_parse_services_skips_unknown(self, caplog) -> None:
        assert parse_services(["claude", "vim"]) == {Service.CLAUDE_CODE}
        assert "vim" in caplog.text

    def test_build_context(self, tmp_path: Path) -> None:
        config = Settings(
            home_dir=tmp_path / "home",
            applications_dir=tmp_path / "Applications",
            backup_dir=tmp_path / "backups",
            enabled_services="claude,windsurf",
            conflict_resolution="source_wins",
        )

        context = build_context(config)

        assert context.paths.home == tmp_path / "home"
        assert context.backups.backup_dir.is_dir()
        assert context.repository.backups is context.backups
        assert context.repository.availability is context.detector
        assert context.engine.repository is context.repository
        assert context.engine.enabled_services == {Service.CLAUDE_CODE, Service.WINDSURF}
        assert context.engine.sync_strategy is SyncStrategy.MANUAL
        assert context.engine.conflict_resolution is ConflictResolution.SOURCE_WINS

    def test_unknown_strategy(self, tmp_path: Path) -> None:
        config = Settings(backup_dir=tmp_path / "backups", sync_strategy="hourly")
        with pytest.raises(ValueError):
            build_context(config)
