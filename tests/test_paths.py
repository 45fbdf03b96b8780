# tests/test_paths.py
"""Tests for PathResolver."""

from pathlib import Path

import pytest

from commandsync.core.commands.models import CommandScope, Service
from commandsync.core.commands.paths import LocationKind, PathResolver


class TestUserLocations:
    """Tests for user-scope locations."""

    def test_claude_directory(self, paths: PathResolver, home: Path) -> None:
        location = paths.user_location(Service.CLAUDE_CODE)
        assert location.kind is LocationKind.DIRECTORY
        assert location.path == home / ".claude" / "commands"

    def test_cursor_directory(self, paths: PathResolver, home: Path) -> None:
        location = paths.user_location(Service.CURSOR)
        assert location.kind is LocationKind.DIRECTORY
        assert location.path == home / ".cursor" / "commands"

    def test_windsurf_single_file(self, paths: PathResolver, home: Path) -> None:
        location = paths.user_location(Service.WINDSURF)
        assert location.kind is LocationKind.FILE
        assert location.path == home / ".codeium" / "windsurf" / "memories" / "global_rules.md"


class TestProjectLocations:
    """Tests for project-scope and legacy locations."""

    @pytest.mark.parametrize(
        ("service", "relative"),
        [
            (Service.CLAUDE_CODE, ".claude/commands"),
            (Service.CURSOR, ".cursor/rules"),
            (Service.WINDSURF, ".windsurf/rules"),
        ],
    )
    def test_project_directories(
        self, paths: PathResolver, project: Path, service: Service, relative: str
    ) -> None:
        assert paths.project_location(service, project).path == project / relative

    def test_legacy_files(self, paths: PathResolver, project: Path) -> None:
        assert paths.legacy_project_file(Service.CURSOR, project) == project / ".cursorrules"
        assert (
            paths.legacy_project_file(Service.WINDSURF, project) == project / ".windsurfrules"
        )
        assert paths.legacy_project_file(Service.CLAUDE_CODE, project) is None


class TestCommandFile:
    """Tests for PathResolver.command_file."""

    def test_claude_user_file(self, paths: PathResolver, home: Path) -> None:
        path = paths.command_file(Service.CLAUDE_CODE, CommandScope.USER, "review")
        assert path == home / ".claude" / "commands" / "review.md"

    def test_cursor_user_commands_are_markdown(self, paths: PathResolver, home: Path) -> None:
        path = paths.command_file(Service.CURSOR, CommandScope.USER, "review")
        assert path == home / ".cursor" / "commands" / "review.md"

    def test_cursor_project_rules_are_mdc(self, paths: PathResolver, project: Path) -> None:
        path = paths.command_file(Service.CURSOR, CommandScope.PROJECT, "style", project)
        assert path == project / ".cursor" / "rules" / "style.mdc"

    def test_windsurf_user_is_global_file(self, paths: PathResolver) -> None:
        path = paths.command_file(Service.WINDSURF, CommandScope.USER, "anything")
        assert path == paths.user_location(Service.WINDSURF).path

    def test_project_scope_without_root(self, paths: PathResolver) -> None:
        with pytest.raises(ValueError):
            paths.command_file(Service.CLAUDE_CODE, CommandScope.PROJECT, "x")


class TestHelpers:
    """Tests for tilde expansion and detection markers."""

    def test_expand_tilde(self, paths: PathResolver, home: Path) -> None:
        assert paths.expand_tilde("~") == home
        assert paths.expand_tilde("~/a/b") == home / "a" / "b"
        assert paths.expand_tilde("/abs/path") == Path("/abs/path")

    def test_claude_binary_candidates(self, paths: PathResolver, home: Path) -> None:
        candidates = paths.claude_binary_candidates()
        assert candidates[0] == home / ".claude" / "bin" / "claude"
        assert Path("/usr/local/bin/claude") in candidates

    def test_app_bundles(self, paths: PathResolver, tmp_path: Path) -> None:
        assert paths.app_bundle(Service.CURSOR) == tmp_path / "Applications" / "Cursor.app"
        assert paths.app_bundle(Service.CLAUDE_CODE) is None

    def test_default_home(self) -> None:
        assert PathResolver().home == Path.home()
